"""
Repository backed by Flask-SQLAlchemy

Each document is one ``Document`` row holding its fields as JSON. Date and
datetime values are written as ISO-8601 strings because JSON has no date type;
the known date fields of a record are parsed back into datetimes on read.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from portal.extensions import db
from portal.models.document import Document
from portal.services.repository import PortalRepository, new_document_id

logger = logging.getLogger(__name__)

DATE_FIELDS = ('testDate', 'createdAt', 'expiryDate')


def to_storable(value):
    """Recursively convert values that JSON columns cannot hold"""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_storable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_storable(v) for v in value]
    return value


def from_storable(doc):
    """Turn the ISO strings of known date fields back into aware datetimes"""
    for field in DATE_FIELDS:
        value = doc.get(field)
        if not isinstance(value, str) or not value:
            continue
        try:
            parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        doc[field] = parsed
    return doc


class SqlRepository(PortalRepository):

    def _query(self, collection):
        return Document.query.filter_by(collection=collection)

    def _all(self, collection):
        return [from_storable(row.to_dict()) for row in self._query(collection).order_by(Document.id).all()]

    def _get(self, collection, doc_id):
        row = self._query(collection).filter_by(doc_id=doc_id).first()
        return from_storable(row.to_dict()) if row else None

    def _add(self, collection, data):
        data = dict(data)
        doc_id = data.pop('id', None) or new_document_id()
        row = Document(collection=collection, doc_id=doc_id, data=to_storable(data))
        try:
            db.session.add(row)
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.exception(f"Failed to store document in {collection}")
            raise
        return doc_id

    def list_tests(self):
        return self._all(self.tests_collection)

    def get_test(self, test_id):
        return self._get(self.tests_collection, test_id)

    def find_tests_by_vehicle(self, vehicle_number):
        # JSON path operators differ per database; filter after loading
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
        row = self._query(self.users_collection).filter_by(doc_id=user_id).first()
        if row is None:
            return False
        try:
            db.session.delete(row)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return True
