"""
==============================================================================
SQLAlchemy ORM Models Module
==============================================================================

The catalog is a schemaless document collection: every product is one
row holding its JSON document. Shape enforcement happens in the
repository and form layers, never here.

Database Schema:
---------------

    ┌─────────────────────────────────────────────────────────────────┐
    │                        product_documents                         │
    ├─────────────────────────────────────────────────────────────────┤
    │ id (VARCHAR(36), PK, generated UUID hex)                        │
    │ data (JSON, NOT NULL)                                           │
    │ created_at (DATETIME, DEFAULT now)                              │
    │ updated_at (DATETIME, AUTO UPDATE)                              │
    └─────────────────────────────────────────────────────────────────┘

==============================================================================
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, Column, DateTime, String, func

from storefront.db.database import Base


def generate_document_id() -> str:
    """Generate an opaque document identifier."""
    return uuid.uuid4().hex


class ProductDocument(Base):
    """
    One catalog document.

    Attributes:
        id: Opaque identifier assigned on insert
        data: Schemaless JSON payload
        created_at: Insert timestamp
        updated_at: Last modification timestamp
    """

    __tablename__ = "product_documents"

    id: str = Column(
        String(36),
        primary_key=True,
        default=generate_document_id,
        doc="Opaque document identifier"
    )

    data: Dict[str, Any] = Column(
        JSON,
        nullable=False,
        default=dict,
        doc="Schemaless document payload"
    )

    created_at: datetime = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True,
        doc="Insert timestamp"
    )

    updated_at: datetime = Column(
        DateTime,
        default=func.now(),
        onupdate=func.now(),
        nullable=False,
        doc="Last modification timestamp"
    )

    def __repr__(self) -> str:
        return f"<ProductDocument(id={self.id!r})>"
