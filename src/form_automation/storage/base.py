"""
Document Storage Interfaces

A small document-store contract: named collections of JSON documents keyed by
string ids. The ledger and configuration provider only depend on this.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class DocumentNotFoundError(KeyError):
    """Raised when updating a document that does not exist."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection}/{doc_id}")
        self.collection = collection
        self.doc_id = doc_id

    def __str__(self) -> str:
        return f"Document not found: {self.collection}/{self.doc_id}"


class DocumentStore(ABC):
    """Storage abstraction for JSON documents."""

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        """Return a copy of the document, or None if absent."""

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or overwrite a document."""

    @abstractmethod
    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Merge fields into an existing document."""

    @abstractmethod
    def add(self, collection: str, data: dict[str, Any]) -> str:
        """Create a document under a generated id and return the id."""

    @abstractmethod
    def where(self, collection: str, field: str, value: Any) -> list[dict[str, Any]]:
        """Return documents whose field equals value, in insertion order."""

    def close(self) -> None:
        """Release any held resources."""
