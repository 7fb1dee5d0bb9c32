"""
Models package

Portal data lives in document collections; ``User`` wraps a users document
for Flask-Login and ``Document`` is the row type of the sql storage backend.
"""
from portal.models.document import Document
from portal.models.user import User

__all__ = ['Document', 'User']
