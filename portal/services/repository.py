"""
Storage repository for test records and user accounts

Views never talk to a storage client directly; they ask ``get_repository()``
for the backend selected by ``STORAGE_BACKEND`` and use the operations below.
Every read returns plain dicts of document fields plus an ``id`` key.
"""
from __future__ import annotations

import copy
import logging
import uuid
from typing import Dict, List, Optional

from flask import current_app

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'portal_repository'
BACKENDS = ('sql', 'firestore', 'memory')


class StorageConfigError(RuntimeError):
    pass


def new_document_id() -> str:
    """Random 20 character id, the same length Firestore generates"""
    return uuid.uuid4().hex[:20]


class PortalRepository:
    """Operations the portal needs from its document store"""

    def __init__(self, tests_collection: str = 'pollution_tests', users_collection: str = 'users'):
        self.tests_collection = tests_collection
        self.users_collection = users_collection

    # Test records

    def list_tests(self) -> List[Dict]:
        raise NotImplementedError

    def get_test(self, test_id: str) -> Optional[Dict]:
        raise NotImplementedError

    def find_tests_by_vehicle(self, vehicle_number: str) -> List[Dict]:
        raise NotImplementedError

    def add_test(self, data: Dict) -> str:
        raise NotImplementedError

    # User accounts

    def list_users(self) -> List[Dict]:
        raise NotImplementedError

    def get_user(self, user_id: str) -> Optional[Dict]:
        raise NotImplementedError

    def find_user_by_email(self, email: str) -> Optional[Dict]:
        raise NotImplementedError

    def create_user(self, data: Dict) -> str:
        raise NotImplementedError

    def delete_user(self, user_id: str) -> bool:
        raise NotImplementedError


class MemoryRepository(PortalRepository):
    """In-process store; documents are copied in and out so callers never share state"""

    def __init__(self, tests_collection: str = 'pollution_tests', users_collection: str = 'users'):
        super().__init__(tests_collection, users_collection)
        self._collections: Dict[str, Dict[str, Dict]] = {
            tests_collection: {},
            users_collection: {},
        }

    def _all(self, collection: str) -> List[Dict]:
        return [
            dict(copy.deepcopy(data), id=doc_id)
            for doc_id, data in self._collections[collection].items()
        ]

    def _get(self, collection: str, doc_id: str) -> Optional[Dict]:
        data = self._collections[collection].get(doc_id)
        if data is None:
            return None
        return dict(copy.deepcopy(data), id=doc_id)

    def _add(self, collection: str, data: Dict) -> str:
        doc_id = data.get('id') or new_document_id()
        stored = copy.deepcopy(data)
        stored.pop('id', None)
        self._collections[collection][doc_id] = stored
        return doc_id

    def list_tests(self):
        return self._all(self.tests_collection)

    def get_test(self, test_id):
        return self._get(self.tests_collection, test_id)

    def find_tests_by_vehicle(self, vehicle_number):
        return [doc for doc in self.list_tests() if doc.get('vehicleNumber') == vehicle_number]

    def add_test(self, data):
        return self._add(self.tests_collection, data)

    def list_users(self):
        return self._all(self.users_collection)

    def get_user(self, user_id):
        return self._get(self.users_collection, user_id)

    def find_user_by_email(self, email):
        for doc in self.list_users():
            if doc.get('email') == email:
                return doc
        return None

    def create_user(self, data):
        return self._add(self.users_collection, data)

    def delete_user(self, user_id):
        return self._collections[self.users_collection].pop(user_id, None) is not None


def init_repository(app) -> PortalRepository:
    """Build the configured backend and attach it to the app"""
    backend = (app.config.get('STORAGE_BACKEND') or 'sql').lower()
    tests_collection = app.config.get('TESTS_COLLECTION', 'pollution_tests')
    users_collection = app.config.get('USERS_COLLECTION', 'users')

    if backend == 'memory':
        repository = MemoryRepository(tests_collection, users_collection)
    elif backend == 'sql':
        from portal.extensions import db
        from portal.services.sql_repository import SqlRepository
        db.init_app(app)
        with app.app_context():
            db.create_all()
        repository = SqlRepository(tests_collection, users_collection)
    elif backend == 'firestore':
        from portal.services.firestore_repository import FirestoreRepository, create_firestore_client
        repository = FirestoreRepository(create_firestore_client(app), tests_collection, users_collection)
    else:
        raise StorageConfigError(
            f"Unknown STORAGE_BACKEND '{backend}' (expected one of: {', '.join(BACKENDS)})"
        )

    app.extensions[EXTENSION_KEY] = repository
    app.logger.info(f"Storage backend: {backend} (tests={tests_collection}, users={users_collection})")
    return repository


def get_repository() -> PortalRepository:
    """Repository bound to the current app"""
    return current_app.extensions[EXTENSION_KEY]
