"""
==============================================================================
Catalog Store Module
==============================================================================

Document collection keyed by generated id.

Supported operations:
--------------------
- get_all(where=None)   -> [(id, document)], optional equality on one field
- get(id)               -> document or None
- insert(document)      -> id
- update(id, fields)    -> merge fields into the document
- delete(id)

The store is schemaless: it never inspects document shape beyond the
single equality predicate of get_all. Concurrent writes to one document
resolve as last-write-wins.

==============================================================================
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool

from storefront.db.database import DatabaseManager
from storefront.db.models import ProductDocument


# Module logger
logger = logging.getLogger(__name__)

Document = Dict[str, Any]
Predicate = Tuple[str, Any]


class DocumentNotFound(LookupError):
    """Raised when an update or delete targets a missing document."""

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Document {document_id!r} does not exist")


class CatalogStore(ABC):
    """Asynchronous document store port."""

    @abstractmethod
    async def get_all(self, where: Optional[Predicate] = None) -> List[Tuple[str, Document]]:
        """Return all documents in insertion order, optionally filtered."""

    @abstractmethod
    async def get(self, document_id: str) -> Optional[Document]:
        """Return one document or None."""

    @abstractmethod
    async def insert(self, document: Document) -> str:
        """Insert a document and return its generated id."""

    @abstractmethod
    async def update(self, document_id: str, fields: Document) -> None:
        """Merge fields into an existing document."""

    @abstractmethod
    async def delete(self, document_id: str) -> None:
        """Delete a document."""

    async def ping(self) -> bool:
        """Check the store is reachable."""
        return True


class SqlCatalogStore(CatalogStore):
    """
    Catalog Store backed by a SQLAlchemy table of JSON documents.

    Blocking database work runs in the threadpool so the event loop
    stays responsive.

    Example:
        >>> store = SqlCatalogStore(DatabaseManager("sqlite://"))
        >>> store.create_tables()
        >>> product_id = await store.insert({"name": "Mug", "price": "9.99"})
    """

    def __init__(self, db_manager: DatabaseManager) -> None:
        self._db = db_manager

    def create_tables(self) -> None:
        self._db.create_tables()

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def get_all(self, where: Optional[Predicate] = None) -> List[Tuple[str, Document]]:
        return await run_in_threadpool(self._get_all, where)

    def _get_all(self, where: Optional[Predicate]) -> List[Tuple[str, Document]]:
        with self._db.session_scope() as session:
            query = session.query(ProductDocument)

            if where is not None:
                field, value = where
                query = query.filter(_json_equals(field, value))

            rows = query.order_by(
                ProductDocument.created_at.asc(),
                ProductDocument.id.asc()
            ).all()
            return [(row.id, dict(row.data or {})) for row in rows]

    async def get(self, document_id: str) -> Optional[Document]:
        return await run_in_threadpool(self._get, document_id)

    def _get(self, document_id: str) -> Optional[Document]:
        with self._db.session_scope() as session:
            row = session.get(ProductDocument, document_id)
            return dict(row.data or {}) if row else None

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    async def insert(self, document: Document) -> str:
        return await run_in_threadpool(self._insert, document)

    def _insert(self, document: Document) -> str:
        with self._db.session_scope() as session:
            row = ProductDocument(data=dict(document))
            session.add(row)
            session.flush()
            logger.debug(f"Inserted document {row.id}")
            return row.id

    async def update(self, document_id: str, fields: Document) -> None:
        await run_in_threadpool(self._update, document_id, fields)

    def _update(self, document_id: str, fields: Document) -> None:
        with self._db.session_scope() as session:
            row = session.get(ProductDocument, document_id)
            if row is None:
                raise DocumentNotFound(document_id)

            # Reassign so SQLAlchemy detects the JSON change
            row.data = {**(row.data or {}), **fields}
            logger.debug(f"Updated document {document_id}: {sorted(fields)}")

    async def delete(self, document_id: str) -> None:
        await run_in_threadpool(self._delete, document_id)

    def _delete(self, document_id: str) -> None:
        with self._db.session_scope() as session:
            row = session.get(ProductDocument, document_id)
            if row is None:
                raise DocumentNotFound(document_id)
            session.delete(row)
            logger.debug(f"Deleted document {document_id}")

    async def ping(self) -> bool:
        return await run_in_threadpool(self._db.verify_connection)


def _json_equals(field: str, value: Any):
    """Build an equality clause on one top-level JSON key."""
    element = ProductDocument.data[field]

    if isinstance(value, bool):
        return element.as_boolean() == value
    if isinstance(value, int):
        return element.as_integer() == value
    if isinstance(value, float):
        return element.as_float() == value
    return element.as_string() == str(value)
