"""
Document row for the sql storage backend
"""
from datetime import datetime, timezone

from portal.extensions import db


class Document(db.Model):
    __tablename__ = 'documents'
    __table_args__ = (
        db.UniqueConstraint('collection', 'doc_id', name='uq_documents_collection_doc_id'),
    )

    id = db.Column(db.Integer, primary_key=True)
    collection = db.Column(db.String(100), nullable=False, index=True)
    doc_id = db.Column(db.String(64), nullable=False, index=True)
    data = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    def to_dict(self):
        """Document fields plus its id, the shape every repository returns"""
        doc = dict(self.data or {})
        doc['id'] = self.doc_id
        return doc

    def __repr__(self):
        return f'<Document {self.collection}/{self.doc_id}>'
