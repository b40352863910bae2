"""
Document store interface
Abstract key/value store of text documents addressed by hierarchical keys
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Document:
    """A stored text document and the version it was read at"""
    key: str
    content: str
    version: int
    updated_at: Optional[datetime] = None


class DocumentStore(ABC):
    """
    Base class for document storage backends

    Versions start at 1 for a new document; a missing document is treated as
    version 0 by the compare-and-swap check in ``write``.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[Document]:
        """Return the document stored at key, or None when it does not exist."""

    @abstractmethod
    def write(self, key: str, content: str, expected_version: Optional[int] = None) -> Document:
        """
        Store content at key.

        Args:
            key: Storage key, e.g. ``sites/north/periods/2026.json``
            content: Text to store
            expected_version: Version the caller read (0 for "did not exist").
                When given and the stored version differs, nothing is written.

        Returns:
            The newly stored document

        Raises:
            ConcurrentModificationException: If expected_version is stale
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the document at key; missing documents are ignored."""

    def exists(self, key: str) -> bool:
        return self.read(key) is not None
