"""SQL Store Base: the six-operation store contract over one async SQLAlchemy session.

Invariants:
    - Every statement runs under the store set's shared asyncio.Lock, so callers
      may gather sibling operations against stores that share one AsyncSession
    - Writes commit immediately when autocommit=True; with autocommit=False the
      caller owns the transaction (commit or rollback of a whole cascade)
    - A unique or primary-key violation -> DuplicateRecordError; every other
      SQLAlchemyError, foreign-key violations included -> StoreFailureError,
      after rolling the session back
    - Reads use populate_existing so bulk deletes/updates are never masked by
      the identity map
    - Deletes of missing rows report 0 and never raise
"""

import asyncio
import logging
from collections.abc import Mapping
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from statusboard.core.errors import DuplicateRecordError, StoreFailureError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")
RecordT = TypeVar("RecordT")

_COLLECTION_TYPES = (list, tuple, set, frozenset)

UNIQUE_VIOLATION = "23505"


def is_unique_violation(error: IntegrityError) -> bool:
    """True for duplicate keys; False for foreign-key, not-null and check violations.

    asyncpg reports the SQLSTATE on the adapted driver error; sqlite only in
    the message text.
    """
    orig = error.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION
    message = str(orig)
    return "UNIQUE constraint failed" in message or "duplicate key" in message


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; every stored time is UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class SqlStore(Generic[ModelT, RecordT]):
    """Shared plumbing for one table-backed entity collection."""

    model: type
    resource_type: str = "Record"
    key_column: str = "id"
    writable_fields: frozenset[str] = frozenset()

    def __init__(
        self, db: AsyncSession, lock: asyncio.Lock, autocommit: bool = True,
    ):
        self.db = db
        self._lock = lock
        self.autocommit = autocommit

    # --- conversion hooks ---------------------------------------------------

    def to_record(self, row: Any) -> RecordT:
        raise NotImplementedError

    def to_row(self, record: RecordT) -> Any:
        raise NotImplementedError

    def to_values(self, patch: Mapping[str, Any]) -> dict:
        return dict(patch)

    # --- guarded execution --------------------------------------------------

    @asynccontextmanager
    async def guard(self, operation: str, write: bool = False, key: str = ""):
        async with self._lock:
            try:
                yield
                if write and self.autocommit:
                    await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                if not is_unique_violation(e):
                    logger.error(
                        f"{self.resource_type} {operation} broke a constraint: {e.orig}",
                    )
                    raise StoreFailureError("Integrity constraint violated", operation)
                logger.warning(f"{self.resource_type} {operation} conflict: {e.orig}")
                raise DuplicateRecordError(self.resource_type, key or "this key")
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(f"{self.resource_type} {operation} failed: {e}")
                raise StoreFailureError("Database operation failed", operation)

    # --- filters ------------------------------------------------------------

    def clause(self, key: str, value: Any):
        column = getattr(self.model, key, None)
        if column is None:
            raise ValueError(f"{self.resource_type} has no filterable field '{key}'")
        if isinstance(value, _COLLECTION_TYPES):
            return column.in_(list(value))
        return column == value

    def where(self, filter: Mapping[str, Any]) -> list:
        return [self.clause(k, v) for k, v in filter.items()]

    # --- contract -----------------------------------------------------------

    async def find(self, record_id: UUID) -> RecordT | None:
        found = await self.find_many({self.key_column: record_id})
        return found[0] if found else None

    async def find_many(self, filter: Mapping[str, Any]) -> list[RecordT]:
        query = (
            select(self.model)
            .where(*self.where(filter))
            .execution_options(populate_existing=True)
        )
        async with self.guard("find"):
            result = await self.db.execute(query)
            rows = result.scalars().all()
        return [self.to_record(row) for row in rows]

    async def insert(self, record: RecordT) -> RecordT:
        row = self.to_row(record)
        async with self.guard("insert", write=True, key=self.describe(record)):
            self.db.add(row)
            await self.db.flush()
            inserted = self.to_record(row)
        return inserted

    async def update_one(
        self, record_id: UUID, patch: Mapping[str, Any],
    ) -> RecordT | None:
        unknown = set(patch) - self.writable_fields
        if unknown:
            raise ValueError(
                f"{self.resource_type} fields not writable: {sorted(unknown)}",
            )
        values = self.to_values(patch)
        if values:
            statement = (
                update(self.model)
                .where(getattr(self.model, self.key_column) == record_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            async with self.guard("update", write=True):
                await self.db.execute(statement)
        return await self.find(record_id)

    async def delete_one(self, record_id: UUID) -> int:
        return await self.delete_many({self.key_column: record_id})

    async def delete_many(self, filter: Mapping[str, Any]) -> int:
        if _matches_nothing(filter):
            return 0
        statement = (
            delete(self.model)
            .where(*self.where(filter))
            .execution_options(synchronize_session=False)
        )
        async with self.guard("delete", write=True):
            result = await self.db.execute(statement)
        return result.rowcount or 0

    def describe(self, record: RecordT) -> str:
        return str(getattr(record, self.key_column, ""))


def _matches_nothing(filter: Mapping[str, Any]) -> bool:
    """An empty membership filter can never match; skip the round trip."""
    return any(
        isinstance(v, _COLLECTION_TYPES) and not v for v in filter.values()
    )
