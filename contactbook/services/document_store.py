"""
ContactBook Backend: Document Store
====================================

What:  Collection-oriented document storage on top of async SQLAlchemy.
How:   find_all / find_by_id / save / update / delete, each keyed by a
       collection name, each running in its own transactional session.
Who:   Constructed once per application (see main.create_app), opened in the
       lifespan handler and injected into routes through request.app.state.
When:  open() at startup, close() at shutdown. Operations on a store that was
       never opened raise StoreUnavailableError.

Error Translation:
    Connection-class failures (driver OperationalError/InterfaceError,
    pool timeouts, OSError from the socket layer) → StoreUnavailableError (503)
    Any other SQLAlchemyError                      → DatabaseError (500)
    Nothing is swallowed: a failed write never looks like a successful one.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional

from sqlalchemy import select, text
from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from contactbook.config import Settings
from contactbook.database import (
    Base,
    create_engine_from_settings,
    create_session_factory,
    session_scope,
)
from contactbook.exceptions import DatabaseError, StoreUnavailableError
from contactbook.models.document import IDENTITY_FIELD, Document

logger = logging.getLogger(__name__)

_CONNECTION_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError, OSError)


def _strip_identity(fields: Mapping[str, Any]) -> Dict[str, Any]:
    # The identity lives in its own column, never inside the body
    return {key: value for key, value in fields.items() if key != IDENTITY_FIELD}


class DocumentStore:
    """
    A schema-flexible document store reachable over DATABASE_URL.

    Records are plain dicts: the body fields plus `_id`. Missing documents are
    reported as None; deciding whether that is a 404 is the caller's job.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def open(self) -> None:
        """
        Create the engine and verify the database answers.

        The first connection is retried with exponential backoff and jitter;
        the database container often comes up after the API container.
        With DB_AUTO_CREATE the schema is created on that same connection.

        Raises:
            StoreUnavailableError: still unreachable after all attempts
        """
        if self._engine is not None:
            return

        self._engine = create_engine_from_settings(self.settings)
        self._session_factory = create_session_factory(self._engine)

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.settings.store_connect_attempts),
                wait=wait_exponential_jitter(
                    initial=self.settings.store_connect_min_wait,
                    max=self.settings.store_connect_max_wait,
                ),
                retry=retry_if_exception_type(_CONNECTION_ERRORS),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    await self._connect()
        except _CONNECTION_ERRORS as e:
            logger.error(
                "Document store unreachable after %d attempts: %s",
                self.settings.store_connect_attempts,
                type(e).__name__,
            )
            await self.close()
            raise StoreUnavailableError(
                context={"operation": "open", "error_type": type(e).__name__},
            ) from e

        logger.info("Document store opened (%s)", self._engine.url.render_as_string(hide_password=True))

    async def _connect(self) -> None:
        async with self._engine.begin() as conn:
            if self.settings.db_auto_create:
                await conn.run_sync(Base.metadata.create_all)
            else:
                await conn.execute(text("SELECT 1"))

    async def close(self) -> None:
        """Dispose the engine, closing every pooled connection."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Document store closed")

    async def ping(self) -> bool:
        """Lightweight reachability check for /health. Never raises."""
        if self._engine is None:
            return False
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Document store ping failed: %s", str(e))
            return False

    # ── Sessions ──────────────────────────────────────────────────────────

    @asynccontextmanager
    async def _session(self, operation: str, collection: str) -> AsyncIterator[AsyncSession]:
        if self._session_factory is None:
            raise StoreUnavailableError(
                context={"operation": operation, "collection": collection, "reason": "store not open"},
            )
        context = {"operation": operation, "collection": collection}
        try:
            async with session_scope(self._session_factory) as session:
                yield session
        except _CONNECTION_ERRORS as e:
            logger.error("Store unavailable during %s on '%s': %s", operation, collection, str(e))
            raise StoreUnavailableError(
                context={**context, "error_type": type(e).__name__},
            ) from e
        except SQLAlchemyError as e:
            logger.error("Store error during %s on '%s': %s", operation, collection, str(e), exc_info=True)
            raise DatabaseError(
                context={**context, "error_type": type(e).__name__},
            ) from e

    @staticmethod
    async def _get(session: AsyncSession, collection: str, doc_id: str) -> Optional[Document]:
        result = await session.execute(
            select(Document).where(
                Document.collection == collection,
                Document.id == doc_id,
            )
        )
        return result.scalar_one_or_none()

    # ── Operations ────────────────────────────────────────────────────────

    async def find_all(self, collection: str) -> List[Dict[str, Any]]:
        """Every document in the collection, in insertion order."""
        async with self._session("find_all", collection) as session:
            result = await session.execute(
                select(Document)
                .where(Document.collection == collection)
                .order_by(Document.seq)
            )
            return [document.to_record() for document in result.scalars().all()]

    async def find_by_id(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        async with self._session("find_by_id", collection) as session:
            document = await self._get(session, collection, doc_id)
            return document.to_record() if document is not None else None

    async def save(self, collection: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Insert a new document and return it with its assigned `_id`.

        Any `_id` present in `fields` is ignored; identities are assigned by
        the store only.
        """
        async with self._session("save", collection) as session:
            document = Document(collection=collection, body=_strip_identity(fields))
            session.add(document)
            await session.flush()
            logger.debug("Saved %s/%s", collection, document.id)
            return document.to_record()

    async def update(
        self,
        collection: str,
        doc_id: str,
        fields: Mapping[str, Any],
    ) -> Optional[Dict[str, Any]]:
        """
        Merge `fields` into an existing document.

        Returns the updated record, or None when no such document exists.
        """
        async with self._session("update", collection) as session:
            document = await self._get(session, collection, doc_id)
            if document is None:
                return None
            body = dict(document.body or {})
            body.update(_strip_identity(fields))
            # New dict instance so the JSON column is flagged dirty
            document.body = body
            await session.flush()
            return document.to_record()

    async def delete(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Remove a document. Returns the removed record, or None if absent."""
        async with self._session("delete", collection) as session:
            document = await self._get(session, collection, doc_id)
            if document is None:
                return None
            record = document.to_record()
            await session.delete(document)
            await session.flush()
            logger.debug("Deleted %s/%s", collection, doc_id)
            return record
