"""
User wrapper for authentication and authorization

Accounts are stored as documents in the users collection; this class maps
one document to a Flask-Login user and back.
"""
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

ROLES = ('admin', 'staff', 'user')


class User(UserMixin):

    def __init__(self, id, email, name='', role='user', password_hash='',
                 vehicle_number='', mobile_number='', active=True, created_at=None):
        self.id = id
        self.email = email
        self.name = name
        self.role = role if role in ROLES else 'user'
        self.password_hash = password_hash
        self.vehicle_number = vehicle_number
        self.mobile_number = mobile_number
        self.active = active
        self.created_at = created_at

    @property
    def is_active(self):
        return bool(self.active)

    @classmethod
    def from_document(cls, doc):
        """Build a user from a users-collection document (with ``id``)"""
        return cls(
            id=doc.get('id'),
            email=doc.get('email', ''),
            name=doc.get('name', ''),
            role=doc.get('role', 'user'),
            password_hash=doc.get('passwordHash', ''),
            vehicle_number=doc.get('vehicleNumber', ''),
            mobile_number=doc.get('mobileNumber', ''),
            active=doc.get('isActive', True),
            created_at=doc.get('createdAt'),
        )

    def to_document(self):
        """Document fields for storage (the id is owned by the repository)"""
        return {
            'email': self.email,
            'name': self.name,
            'role': self.role,
            'passwordHash': self.password_hash,
            'vehicleNumber': self.vehicle_number,
            'mobileNumber': self.mobile_number,
            'isActive': self.active,
            'createdAt': self.created_at,
        }

    def get_id(self):
        return str(self.id)

    def set_password(self, password):
        """Hash and set password"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Verify password against hash"""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def has_role(self, *roles):
        """Check if user has any of the specified roles.

        Admins pass every staff check; a staff-only page is also an admin page.
        """
        if self.role == 'admin' and 'staff' in roles:
            return True
        return self.role in roles

    @property
    def display_name(self):
        return self.name or self.email

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'
