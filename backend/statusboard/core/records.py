"""Records: storage-agnostic snapshots of the five entity collections.

Invariants:
    - Records are frozen; stores return new records, never mutate old ones
    - A project's participant_ids and invited_ids are disjoint
    - Thanks and EyesWanted are unique per (user, update) pair
    - Populated* records carry the expanded foreign entities the projector needs

Design Decisions:
    - Dataclasses rather than ORM objects, so core logic and tests never touch a session
"""

from dataclasses import dataclass, field
from datetime import datetime

from statusboard.core.domain_types import (
    UserId, ProjectId, UpdateId, ThanksId, EyesWantedId,
)


@dataclass(frozen=True)
class UserRecord:
    id: UserId
    email: str
    first_name: str
    last_name: str
    password_hash: str
    created_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class ProjectRecord:
    id: ProjectId
    project_name: str
    creator_id: UserId
    participant_ids: tuple[UserId, ...] = ()
    invited_ids: tuple[UserId, ...] = ()
    tags: tuple[str, ...] = ()
    active: bool = True
    scheduled_updates: tuple[datetime, ...] = ()
    created_at: datetime | None = None

    def has_participant(self, user_id: UserId) -> bool:
        return user_id in self.participant_ids

    def has_invitee(self, user_id: UserId) -> bool:
        return user_id in self.invited_ids

    def has_member(self, user_id: UserId) -> bool:
        return self.has_participant(user_id) or self.has_invitee(user_id)


@dataclass(frozen=True)
class UpdateRecord:
    id: UpdateId
    project_id: ProjectId
    author_id: UserId
    status: str
    summary: str
    details: str
    todos: str | None = None
    blockers: str | None = None
    created_at: datetime | None = None
    modified_at: datetime | None = None


@dataclass(frozen=True)
class ThanksRecord:
    id: ThanksId
    post_user_id: UserId
    update_id: UpdateId
    created_at: datetime | None = None


@dataclass(frozen=True)
class EyesWantedRecord:
    id: EyesWantedId
    user_id: UserId
    update_id: UpdateId
    created_at: datetime | None = None


@dataclass(frozen=True)
class SessionRecord:
    token: str
    user_id: UserId
    created_at: datetime
    expires_at: datetime


# ─── Expanded views (input to the Response Projector) ───────────

@dataclass(frozen=True)
class PopulatedProject:
    project: ProjectRecord
    creator: UserRecord
    participants: list[UserRecord] = field(default_factory=list)
    invited_users: list[UserRecord] = field(default_factory=list)


@dataclass(frozen=True)
class PopulatedUpdate:
    update: UpdateRecord
    author: UserRecord
    project: ProjectRecord


@dataclass(frozen=True)
class PopulatedReaction:
    """A Thanks or EyesWanted record with its acting user expanded."""
    id: ThanksId | EyesWantedId
    user: UserRecord
    update_id: UpdateId
