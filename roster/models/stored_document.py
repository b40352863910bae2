"""
Stored document model
Holds one JSON text blob per hierarchical storage key
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime


def create_stored_document_model(db):
    """
    Factory function to create the StoredDocument model

    Args:
        db: SQLAlchemy database instance

    Returns:
        StoredDocument model class
    """

    class StoredDocument(db.Model):
        """
        A text document addressed by a path-like key such as
        ``sites/north/periods/2026.json``

        ``version`` increases by one on every committed write and backs the
        compare-and-swap check of the document store.
        """
        __tablename__ = 'stored_documents'
        __table_args__ = {'extend_existing': True}

        id = Column(Integer, primary_key=True, autoincrement=True)
        key = Column(String(255), unique=True, nullable=False, index=True)
        content = Column(Text, nullable=False)
        version = Column(Integer, nullable=False, default=1)
        updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

        def __repr__(self):
            return f'<StoredDocument {self.key} v{self.version}>'

    return StoredDocument
