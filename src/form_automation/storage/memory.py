"""
In-memory document store, used for local runs and tests.
"""

import copy
import threading
import uuid
from typing import Any, Optional

from .base import DocumentNotFoundError, DocumentStore


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed document store."""

    def __init__(self):
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        with self._lock:
            docs = self._collections.setdefault(collection, {})
            # Overwrites keep their original insertion slot.
            docs[doc_id] = copy.deepcopy(data)

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        with self._lock:
            docs = self._collections.get(collection, {})
            if doc_id not in docs:
                raise DocumentNotFoundError(collection, doc_id)
            docs[doc_id].update(copy.deepcopy(fields))

    def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        self.set(collection, doc_id, data)
        return doc_id

    def where(self, collection: str, field: str, value: Any) -> list[dict[str, Any]]:
        with self._lock:
            return [
                copy.deepcopy(doc)
                for doc in self._collections.get(collection, {}).values()
                if doc.get(field) == value
            ]

    def collection(self, collection: str) -> dict[str, dict[str, Any]]:
        """Snapshot of a whole collection, keyed by document id."""
        with self._lock:
            return copy.deepcopy(self._collections.get(collection, {}))
