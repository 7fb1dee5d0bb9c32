import os
from datetime import datetime, timedelta, timezone

import pytest
from portal import create_app
from portal.models.user import User
from portal.services.repository import get_repository
from portal.services.security import rate_limiter

# Config requires SECRET_KEY when it is first imported
os.environ.setdefault('SECRET_KEY', 'test-secret')
os.environ['FLASK_ENV'] = 'testing'

NOW = datetime.now(timezone.utc)

SAMPLE_TESTS = [
    {
        'id': 'T-TODAY',
        'vehicleNumber': 'TN-01-AB-1234',
        'ownerName': 'Ravi Kumar',
        'mobileNumber': '9876543210',
        'vehicleType': 'car',
        'fuelType': 'petrol',
        'testResult': 'Pass',
        'location': 'Erode, TN',
        'testDate': NOW,
        'expiryDate': NOW + timedelta(days=180),
    },
    {
        'id': 'T-OLD',
        'vehicleNumber': 'TN-33-CD-5678',
        'ownerName': 'Meena S',
        'mobileNumber': '9123456780',
        'vehicleType': 'bike',
        'fuelType': 'petrol',
        'testResult': 'Fail',
        'testDate': datetime(2023, 1, 15, 10, 30, tzinfo=timezone.utc),
        'expiryDate': datetime(2023, 7, 15, tzinfo=timezone.utc),
    },
    {
        'id': 'T-CREATED',
        'vehicleNumber': 'KA-05-EF-9012',
        'ownerName': 'Arun Prakash',
        'vehicleType': 'truck',
        'fuelType': 'diesel',
        'testResult': 'Pass',
        'createdAt': '2024-03-10T08:00:00Z',
        'expiryDate': '2024-09-10T08:00:00Z',
    },
]

STAFF_EMAIL = 'staff@example.com'
STAFF_PASSWORD = 'staffpass'
OWNER_EMAIL = 'ravi@example.com'
OWNER_PASSWORD = 'ownerpass'


@pytest.fixture()
def temp_db(tmp_path):
    db_file = tmp_path / 'test_emission_portal.db'
    return f'sqlite:///{db_file.as_posix()}'


def _add_account(email, password, role, **extra):
    user = User(id=None, email=email, name=email.split('@')[0].title(), role=role,
                created_at=NOW.isoformat(), **extra)
    user.set_password(password)
    return get_repository().create_user(user.to_document())


@pytest.fixture()
def app(temp_db):
    config = {
        'TESTING': True,
        'STORAGE_BACKEND': 'sql',
        'SQLALCHEMY_DATABASE_URI': temp_db,
        'SECRET_KEY': 'test-secret',
        'REPORT_TIMEZONE': 'UTC',
    }
    app = create_app(config=config)
    rate_limiter.attempts.clear()

    with app.app_context():
        repository = get_repository()
        for record in SAMPLE_TESTS:
            repository.add_test(record)
        _add_account(STAFF_EMAIL, STAFF_PASSWORD, 'staff')
        _add_account(OWNER_EMAIL, OWNER_PASSWORD, 'user',
                     vehicle_number='TN-01-AB-1234', mobile_number='9876543210')

    yield app

    from portal.extensions import db
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture()
def client(app):
    return app.test_client()


def _login(client, email, password):
    rv = client.post('/auth/login', data={'email': email, 'password': password}, follow_redirects=True)
    assert b'Welcome back' in rv.data
    return client


@pytest.fixture()
def logged_in_client(client):
    # Log in as the bootstrap admin
    return _login(client, 'admin@example.com', 'admin123')


@pytest.fixture()
def staff_client(app):
    return _login(app.test_client(), STAFF_EMAIL, STAFF_PASSWORD)


@pytest.fixture()
def user_client(app):
    return _login(app.test_client(), OWNER_EMAIL, OWNER_PASSWORD)
