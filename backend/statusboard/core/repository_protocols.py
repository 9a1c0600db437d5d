"""Boundary Protocols: store contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Every entity collection is reached through the same six-operation contract
    - delete_one / delete_many return the number of removed records; a missing
      record counts as 0 and is never an error
    - Implementations map engine failures to StoreFailureError

Design Decisions:
    - Protocol over ABC: structural subtyping, in-memory fakes in tests need no base class
    - Filters are plain mappings: a collection value means membership, a scalar
      means equality. Project filters accept participant_ids / invited_ids /
      member_id with a scalar user id meaning "contains this user"
    - Membership removal is its own operation: it drops one user from the
      member sets in place, never by writing back a previously read list
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar
from uuid import UUID

from statusboard.core.records import (
    UserRecord, ProjectRecord, UpdateRecord, ThanksRecord,
    EyesWantedRecord, SessionRecord,
)

RecordT = TypeVar("RecordT")

Filter = Mapping[str, Any]
Patch = Mapping[str, Any]


class Store(Protocol[RecordT]):
    """Generic contract for one persistent entity collection."""
    async def find(self, record_id: UUID) -> RecordT | None: ...
    async def find_many(self, filter: Filter) -> list[RecordT]: ...
    async def insert(self, record: RecordT) -> RecordT: ...
    async def update_one(self, record_id: UUID, patch: Patch) -> RecordT | None: ...
    async def delete_one(self, record_id: UUID) -> int: ...
    async def delete_many(self, filter: Filter) -> int: ...


class UserStore(Store[UserRecord], Protocol):
    """Users, plus a case-insensitive lookup by email."""
    async def find_by_email(self, email: str) -> UserRecord | None: ...


class ProjectStore(Store[ProjectRecord], Protocol):
    """Projects with their participant and invitee sets."""
    async def remove_member(
        self, project_ids: Iterable[UUID], user_id: UUID,
    ) -> int: ...


class UpdateStore(Store[UpdateRecord], Protocol):
    """Status updates, owned by a project."""


class ThanksStore(Store[ThanksRecord], Protocol):
    """Thanks reactions, unique per (post_user_id, update_id)."""


class EyesWantedStore(Store[EyesWantedRecord], Protocol):
    """EyesWanted flags, unique per (user_id, update_id)."""


class SessionStore(Protocol):
    """Sign-in sessions keyed by opaque token."""
    async def find(self, token: str) -> SessionRecord | None: ...
    async def insert(self, record: SessionRecord) -> SessionRecord: ...
    async def delete_one(self, token: str) -> int: ...
    async def delete_many(self, filter: Filter) -> int: ...


@dataclass(frozen=True)
class StoreSet:
    """The full set of stores a cascade touches, injected by the shell."""
    users: UserStore
    projects: ProjectStore
    updates: UpdateStore
    thanks: ThanksStore
    eyes_wanted: EyesWantedStore
    sessions: SessionStore
