"""
ContactBook Backend: Document ORM Model
========================================

What:  ORM model for the `documents` table, the storage behind DocumentStore.
How:   One row per document. `collection` partitions rows the way a document
       database partitions collections; `body` holds the document's fields as
       JSON (JSONB on PostgreSQL); `_id` is the store-assigned identity.

Table Design:
    - seq:        autoincrement surrogate key, gives a stable natural order
    - _id:        24 hex chars (8 hex seconds + 16 random hex), unique
    - collection: indexed, every query filters on it
    - body:       schema-flexible field map, no identity inside it
    - created_at / updated_at: UTC, timezone aware
"""

import secrets
import time
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from contactbook.database import Base

IDENTITY_FIELD = "_id"


def new_object_id() -> str:
    """Return a time-prefixed 24-character hex identity."""
    return f"{int(time.time()):08x}{secrets.token_hex(8)}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(Base):
    """A single stored document belonging to one collection."""

    __tablename__ = "documents"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Attribute `id`, column `_id`: the column keeps the store's vocabulary
    id: Mapped[str] = mapped_column(
        IDENTITY_FIELD,
        String(24),
        nullable=False,
        unique=True,
        default=new_object_id,
    )

    collection: Mapped[str] = mapped_column(String(64), nullable=False)

    body: Mapped[Dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=dict,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        Index("idx_documents_collection_seq", "collection", "seq"),
    )

    def to_record(self) -> Dict[str, Any]:
        """Flatten into the store's record shape: identity plus body fields."""
        record = {IDENTITY_FIELD: self.id}
        record.update(self.body or {})
        return record

    def __repr__(self) -> str:
        return f"<Document(_id={self.id}, collection='{self.collection}')>"
