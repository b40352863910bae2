"""
Filesystem document store
Keeps each document as a file under a data directory, mirroring the key path
"""
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout

from roster.error_handlers import storage_logger
from roster.error_handlers.exceptions import (
    ConcurrentModificationException,
    StorageException,
    ValidationException,
)
from .base import Document, DocumentStore

VERSION_SUFFIX = '.version'
LOCK_SUFFIX = '.lock'
DEFAULT_LOCK_TIMEOUT = 10


class FileDocumentStore(DocumentStore):
    """
    Document store on the local filesystem

    The version of ``<key>`` lives next to it in ``<key>.version``. Files are
    replaced atomically. Reads, the version check plus write, and deletes hold
    an OS-level lock on ``<key>.lock``, so every process sharing the data
    directory (e.g. several Gunicorn workers) sees the same versions.
    """

    def __init__(self, data_dir, lock_timeout: float = DEFAULT_LOCK_TIMEOUT):
        self.data_dir = Path(data_dir).resolve()
        self.lock_timeout = lock_timeout

    def _path_for(self, key: str) -> Path:
        path = (self.data_dir / key).resolve()
        if self.data_dir not in path.parents:
            raise ValidationException(f"Invalid storage key: {key}")
        return path

    def _lock_for(self, path: Path) -> FileLock:
        path.parent.mkdir(parents=True, exist_ok=True)
        return FileLock(str(path.with_name(path.name + LOCK_SUFFIX)), timeout=self.lock_timeout)

    @staticmethod
    def _read_version(path: Path) -> int:
        version_path = path.with_name(path.name + VERSION_SUFFIX)
        if not version_path.exists():
            # Documents placed by hand have no sidecar yet
            return 1 if path.exists() else 0
        return int(version_path.read_text(encoding='utf-8').strip() or 0)

    @staticmethod
    def _atomic_write(path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f'.{path.name}.')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def read(self, key: str) -> Optional[Document]:
        path = self._path_for(key)
        if not path.exists():
            storage_logger.document_read(key, False)
            return None
        try:
            # Content and version must come from the same write
            with self._lock_for(path):
                if not path.exists():
                    storage_logger.document_read(key, False)
                    return None
                content = path.read_text(encoding='utf-8')
                version = self._read_version(path)
                updated_at = datetime.utcfromtimestamp(path.stat().st_mtime)
        except Timeout as e:
            storage_logger.storage_failed('read', key, e)
            raise StorageException(f"Timed out waiting for the lock on {key}")
        except (OSError, ValueError) as e:
            storage_logger.storage_failed('read', key, e)
            raise StorageException(f"Failed to read {key}: {e}")
        storage_logger.document_read(key, True)
        return Document(key=key, content=content, version=version, updated_at=updated_at)

    def write(self, key: str, content: str, expected_version: Optional[int] = None) -> Document:
        path = self._path_for(key)
        try:
            with self._lock_for(path):
                current_version = self._read_version(path)

                if expected_version is not None and expected_version != current_version:
                    storage_logger.write_conflict(key, expected_version, current_version)
                    raise ConcurrentModificationException(
                        f"{key} was modified concurrently",
                        details={'key': key, 'expected_version': expected_version, 'current_version': current_version}
                    )

                new_version = current_version + 1
                self._atomic_write(path, content)
                self._atomic_write(path.with_name(path.name + VERSION_SUFFIX), str(new_version))
        except Timeout as e:
            storage_logger.storage_failed('write', key, e)
            raise StorageException(f"Timed out waiting for the lock on {key}")
        except (OSError, ValueError) as e:
            storage_logger.storage_failed('write', key, e)
            raise StorageException(f"Failed to write {key}: {e}")

        storage_logger.document_written(key, new_version)
        return Document(key=key, content=content, version=new_version, updated_at=datetime.utcnow())

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            with self._lock_for(path):
                for target in (path, path.with_name(path.name + VERSION_SUFFIX)):
                    try:
                        target.unlink()
                    except FileNotFoundError:
                        pass
        except Timeout as e:
            storage_logger.storage_failed('delete', key, e)
            raise StorageException(f"Timed out waiting for the lock on {key}")
        except OSError as e:
            storage_logger.storage_failed('delete', key, e)
            raise StorageException(f"Failed to delete {key}: {e}")
