"""
Repository backed by Google Cloud Firestore through firebase-admin
"""
from __future__ import annotations

import logging
import os

import firebase_admin
from firebase_admin import credentials, firestore

from portal.services.repository import PortalRepository, StorageConfigError

logger = logging.getLogger(__name__)


def create_firestore_client(app):
    """
    Initialize the default firebase app once and return a Firestore client.

    Uses the service-account file in FIREBASE_CREDENTIALS when set, otherwise
    the application default credentials of the host.
    """
    try:
        firebase_app = firebase_admin.get_app()
    except ValueError:
        cred_path = app.config.get('FIREBASE_CREDENTIALS')
        if cred_path:
            if not os.path.exists(cred_path):
                raise StorageConfigError(f"FIREBASE_CREDENTIALS file not found: {cred_path}")
            cred = credentials.Certificate(cred_path)
        else:
            cred = credentials.ApplicationDefault()

        options = {}
        if app.config.get('FIREBASE_PROJECT_ID'):
            options['projectId'] = app.config['FIREBASE_PROJECT_ID']
        firebase_app = firebase_admin.initialize_app(cred, options or None)

    return firestore.client(firebase_app)


def snapshot_to_dict(snapshot):
    doc = snapshot.to_dict() or {}
    doc['id'] = snapshot.id
    return doc


class FirestoreRepository(PortalRepository):

    def __init__(self, client, tests_collection='pollution_tests', users_collection='users'):
        super().__init__(tests_collection, users_collection)
        self.client = client

    def _all(self, collection):
        return [snapshot_to_dict(s) for s in self.client.collection(collection).stream()]

    def _get(self, collection, doc_id):
        snapshot = self.client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot_to_dict(snapshot)

    def _where_equal(self, collection, field, value, limit=None):
        query = self.client.collection(collection).where(
            filter=firestore.FieldFilter(field, '==', value)
        )
        if limit:
            query = query.limit(limit)
        return [snapshot_to_dict(s) for s in query.stream()]

    def _add(self, collection, data):
        data = dict(data)
        doc_id = data.pop('id', None)
        if doc_id:
            self.client.collection(collection).document(doc_id).set(data)
            return doc_id
        _, ref = self.client.collection(collection).add(data)
        return ref.id

    def list_tests(self):
        return self._all(self.tests_collection)

    def get_test(self, test_id):
        return self._get(self.tests_collection, test_id)

    def find_tests_by_vehicle(self, vehicle_number):
        return self._where_equal(self.tests_collection, 'vehicleNumber', vehicle_number)

    def add_test(self, data):
        return self._add(self.tests_collection, data)

    def list_users(self):
        return self._all(self.users_collection)

    def get_user(self, user_id):
        return self._get(self.users_collection, user_id)

    def find_user_by_email(self, email):
        matches = self._where_equal(self.users_collection, 'email', email, limit=1)
        return matches[0] if matches else None

    def create_user(self, data):
        return self._add(self.users_collection, data)

    def delete_user(self, user_id):
        ref = self.client.collection(self.users_collection).document(user_id)
        if not ref.get().exists:
            return False
        ref.delete()
        logger.info(f"Deleted user document {user_id}")
        return True
