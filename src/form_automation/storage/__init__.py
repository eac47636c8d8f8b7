"""
Storage Package

Document store implementations for the run ledger and site configuration, and
the object bucket PDFs are uploaded to.
"""

from typing import Optional

from .base import DocumentNotFoundError, DocumentStore
from .bucket import LocalBucket
from .memory import InMemoryDocumentStore


def create_document_store(database_url: Optional[str] = None) -> DocumentStore:
    """Build the store for a database URL; no URL means in-memory."""
    if not database_url:
        return InMemoryDocumentStore()
    from .sqlalchemy_store import SQLAlchemyDocumentStore
    return SQLAlchemyDocumentStore(database_url)


__all__ = [
    "DocumentStore",
    "DocumentNotFoundError",
    "InMemoryDocumentStore",
    "LocalBucket",
    "create_document_store",
]
