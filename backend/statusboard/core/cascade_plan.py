"""Cascade Plan: pure construction of deletion plans from already-fetched records.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - The dependent update set is an explicit set union of every edge that
      reaches an update (authorship, project ownership); an update reachable
      through both edges appears once
    - Reaction sets are partitioned, never overlapping: reactions on dependent
      updates vs. the user's own reactions elsewhere
    - Projects owned by the deleted user are never in the membership set
      (they are deleted, not edited)

Design Decisions:
    - Plans hold ids, not records: every orchestrator step is a bulk delete
      scoped by these sets, so a retry after partial failure touches nothing
      twice and re-planning on a half-deleted graph yields the remainder
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from statusboard.core.domain_types import (
    UserId, ProjectId, UpdateId, ThanksId, EyesWantedId, CascadeStep,
)
from statusboard.core.records import (
    ProjectRecord, UpdateRecord, ThanksRecord, EyesWantedRecord,
)


@dataclass(frozen=True)
class UserCascadePlan:
    """Everything that must change when a user is deleted."""
    user_id: UserId
    authored_update_ids: frozenset[UpdateId] = frozenset()
    owned_project_ids: frozenset[ProjectId] = frozenset()
    update_ids: frozenset[UpdateId] = frozenset()
    thanks_on_updates: frozenset[ThanksId] = frozenset()
    eyes_on_updates: frozenset[EyesWantedId] = frozenset()
    own_thanks_elsewhere: frozenset[ThanksId] = frozenset()
    own_eyes_elsewhere: frozenset[EyesWantedId] = frozenset()
    memberships: tuple[ProjectRecord, ...] = ()

    @property
    def thanks_ids(self) -> frozenset[ThanksId]:
        return self.thanks_on_updates | self.own_thanks_elsewhere

    @property
    def eyes_wanted_ids(self) -> frozenset[EyesWantedId]:
        return self.eyes_on_updates | self.own_eyes_elsewhere

    @property
    def membership_project_ids(self) -> tuple[ProjectId, ...]:
        return tuple(p.id for p in self.memberships)

    @property
    def is_empty(self) -> bool:
        return not (
            self.update_ids or self.owned_project_ids or self.thanks_ids
            or self.eyes_wanted_ids or self.memberships
        )


@dataclass(frozen=True)
class ProjectCascadePlan:
    """Everything that must go when a project is deleted."""
    project_id: ProjectId
    update_ids: frozenset[UpdateId] = frozenset()
    thanks_ids: frozenset[ThanksId] = frozenset()
    eyes_wanted_ids: frozenset[EyesWantedId] = frozenset()


def merge_update_ids(*groups: Iterable[UpdateRecord]) -> frozenset[UpdateId]:
    """Union of update ids over any number of reachability edges."""
    return frozenset(u.id for group in groups for u in group)


def plan_user_deletion(
    user_id: UserId,
    authored_updates: Iterable[UpdateRecord],
    owned_projects: Iterable[ProjectRecord],
    owned_project_updates: Iterable[UpdateRecord],
    thanks: Iterable[ThanksRecord],
    eyes_wanted: Iterable[EyesWantedRecord],
    member_projects: Iterable[ProjectRecord],
) -> UserCascadePlan:
    """Build the user cascade plan.

    `thanks` / `eyes_wanted` may contain the same record twice (fetched once
    by update id and once by acting user); records are keyed by id so the
    duplicate collapses.
    """
    authored_updates = list(authored_updates)
    owned_projects = list(owned_projects)
    owned_ids = frozenset(p.id for p in owned_projects)
    update_ids = merge_update_ids(authored_updates, owned_project_updates)

    thanks_on, thanks_elsewhere = _partition_reactions(
        thanks, update_ids, user_id, lambda t: t.post_user_id,
    )
    eyes_on, eyes_elsewhere = _partition_reactions(
        eyes_wanted, update_ids, user_id, lambda e: e.user_id,
    )

    seen: set[ProjectId] = set()
    memberships = []
    for project in member_projects:
        if project.id in owned_ids or project.id in seen:
            continue
        if project.creator_id == user_id or not project.has_member(user_id):
            continue
        seen.add(project.id)
        memberships.append(project)

    return UserCascadePlan(
        user_id=user_id,
        authored_update_ids=frozenset(u.id for u in authored_updates),
        owned_project_ids=owned_ids,
        update_ids=update_ids,
        thanks_on_updates=thanks_on,
        eyes_on_updates=eyes_on,
        own_thanks_elsewhere=thanks_elsewhere,
        own_eyes_elsewhere=eyes_elsewhere,
        memberships=tuple(memberships),
    )


def plan_project_deletion(
    project_id: ProjectId,
    updates: Iterable[UpdateRecord],
    thanks: Iterable[ThanksRecord],
    eyes_wanted: Iterable[EyesWantedRecord],
) -> ProjectCascadePlan:
    """Restriction of the user plan to a single project's updates."""
    update_ids = frozenset(u.id for u in updates if u.project_id == project_id)
    return ProjectCascadePlan(
        project_id=project_id,
        update_ids=update_ids,
        thanks_ids=frozenset(t.id for t in thanks if t.update_id in update_ids),
        eyes_wanted_ids=frozenset(
            e.id for e in eyes_wanted if e.update_id in update_ids
        ),
    )


def _partition_reactions(records, update_ids, user_id, actor):
    on_updates: set = set()
    elsewhere: set = set()
    for record in records:
        if record.update_id in update_ids:
            on_updates.add(record.id)
        elif actor(record) == user_id:
            elsewhere.add(record.id)
    return frozenset(on_updates), frozenset(elsewhere)


# ─── Cascade summary ────────────────────────────────────────────

@dataclass
class CascadeSummary:
    """Counts of records removed or edited by one cascade run.

    A summary is only ever returned for a completed cascade; a failing step
    raises instead, so `success` is always True on a returned summary.
    """
    root_type: str
    root_id: str
    eyes_wanted_deleted: int = 0
    thanks_deleted: int = 0
    updates_deleted: int = 0
    projects_deleted: int = 0
    memberships_removed: int = 0
    users_deleted: int = 0
    sessions_invalidated: int = 0
    steps_completed: list[CascadeStep] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return True

    @property
    def total_affected(self) -> int:
        return (
            self.eyes_wanted_deleted + self.thanks_deleted
            + self.updates_deleted + self.projects_deleted
            + self.memberships_removed + self.users_deleted
        )

    def to_response(self) -> dict:
        return {
            "success": self.success,
            "deleted": {
                "eyes_wanted": self.eyes_wanted_deleted,
                "thanks": self.thanks_deleted,
                "updates": self.updates_deleted,
                "projects": self.projects_deleted,
                "users": self.users_deleted,
            },
            "memberships_removed": self.memberships_removed,
        }
