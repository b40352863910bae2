"""
SQL-backed document store
Keeps each document as a row of the stored_documents table
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from roster.error_handlers import storage_logger
from roster.error_handlers.exceptions import ConcurrentModificationException, StorageException
from .base import Document, DocumentStore


class DatabaseDocumentStore(DocumentStore):
    """
    Document store on top of Flask-SQLAlchemy

    Writes use a conditional UPDATE on the version column so two writers that
    read the same version cannot both commit.
    """

    def __init__(self, db, model):
        """
        Args:
            db: Flask-SQLAlchemy instance
            model: StoredDocument model class
        """
        self.db = db
        self.Model = model

    def _to_document(self, row) -> Document:
        return Document(key=row.key, content=row.content, version=row.version, updated_at=row.updated_at)

    def read(self, key: str) -> Optional[Document]:
        try:
            row = self.db.session.query(self.Model).filter_by(key=key).first()
        except SQLAlchemyError as e:
            storage_logger.storage_failed('read', key, e)
            raise StorageException(f"Failed to read {key}: {e}")
        storage_logger.document_read(key, row is not None)
        return self._to_document(row) if row else None

    def write(self, key: str, content: str, expected_version: Optional[int] = None) -> Document:
        session = self.db.session
        try:
            row = session.query(self.Model).filter_by(key=key).first()
            current_version = row.version if row else 0

            if expected_version is not None and expected_version != current_version:
                storage_logger.write_conflict(key, expected_version, current_version)
                raise ConcurrentModificationException(
                    f"{key} was modified concurrently",
                    details={'key': key, 'expected_version': expected_version, 'current_version': current_version}
                )

            if row is None:
                row = self.Model(key=key, content=content, version=1, updated_at=datetime.utcnow())
                session.add(row)
                new_version = 1
            else:
                new_version = current_version + 1
                updated = session.query(self.Model).filter(
                    self.Model.key == key,
                    self.Model.version == current_version
                ).update({
                    'content': content,
                    'version': new_version,
                    'updated_at': datetime.utcnow()
                }, synchronize_session='fetch')
                if updated == 0:
                    session.rollback()
                    storage_logger.write_conflict(key, current_version, 'unknown')
                    raise ConcurrentModificationException(
                        f"{key} was modified concurrently",
                        details={'key': key, 'expected_version': current_version}
                    )

            session.commit()
        except IntegrityError:
            # Another writer created the document first
            session.rollback()
            storage_logger.write_conflict(key, 0, 'created elsewhere')
            raise ConcurrentModificationException(
                f"{key} was created concurrently",
                details={'key': key, 'expected_version': 0}
            )
        except SQLAlchemyError as e:
            session.rollback()
            storage_logger.storage_failed('write', key, e)
            raise StorageException(f"Failed to write {key}: {e}")

        storage_logger.document_written(key, new_version)
        return Document(key=key, content=content, version=new_version, updated_at=datetime.utcnow())

    def delete(self, key: str) -> None:
        session = self.db.session
        try:
            session.query(self.Model).filter_by(key=key).delete()
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            storage_logger.storage_failed('delete', key, e)
            raise StorageException(f"Failed to delete {key}: {e}")
