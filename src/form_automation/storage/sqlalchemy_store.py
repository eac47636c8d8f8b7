"""
SQLAlchemy-backed document store.

Documents live in a single `documents` table as JSON, one row per
collection/id pair.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Integer, String, UniqueConstraint, create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from .base import DocumentNotFoundError, DocumentStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DocumentRow(Base):
    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection: Mapped[str] = mapped_column(String(128), index=True)
    doc_id: Mapped[str] = mapped_column(String(255))
    data: Mapped[dict] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class SQLAlchemyDocumentStore(DocumentStore):
    """Persist documents through a SQLAlchemy engine."""

    def __init__(self, database_url: str, *, echo: bool = False):
        self._engine = create_engine(database_url, echo=echo, future=True)
        Base.metadata.create_all(self._engine)
        self._sessions = sessionmaker(bind=self._engine, expire_on_commit=False)

    def _find(self, session: Session, collection: str, doc_id: str) -> Optional[DocumentRow]:
        stmt = select(DocumentRow).where(
            DocumentRow.collection == collection,
            DocumentRow.doc_id == doc_id,
        )
        return session.execute(stmt).scalar_one_or_none()

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        with self._sessions() as session:
            row = self._find(session, collection, doc_id)
            return dict(row.data) if row is not None else None

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        with self._sessions() as session:
            try:
                row = self._find(session, collection, doc_id)
                if row is None:
                    session.add(DocumentRow(collection=collection, doc_id=doc_id, data=dict(data)))
                else:
                    row.data = dict(data)
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                raise

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        with self._sessions() as session:
            try:
                row = self._find(session, collection, doc_id)
                if row is None:
                    raise DocumentNotFoundError(collection, doc_id)
                # Reassign so the JSON column is flagged dirty.
                row.data = {**row.data, **fields}
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                raise

    def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        self.set(collection, doc_id, data)
        return doc_id

    def where(self, collection: str, field: str, value: Any) -> list[dict[str, Any]]:
        with self._sessions() as session:
            stmt = (
                select(DocumentRow)
                .where(DocumentRow.collection == collection)
                .order_by(DocumentRow.id)
            )
            rows = session.execute(stmt).scalars().all()
            return [dict(row.data) for row in rows if row.data.get(field) == value]

    def close(self) -> None:
        self._engine.dispose()
