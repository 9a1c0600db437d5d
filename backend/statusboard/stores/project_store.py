"""Project Store: projects plus project_members behind the ProjectStore protocol.

Invariants:
    - A project record's participant_ids / invited_ids are read from
      project_members ordered by position
    - Patching participant_ids or invited_ids rewrites that project's member
      rows; the other set is kept as stored
    - Deleting a project deletes its member rows first, in the same statement batch
    - remove_member deletes one user's member rows in a single statement, so
      membership changes committed by other requests are never overwritten
    - Filter keys participant_ids / invited_ids / member_id with a scalar user
      id select projects containing that user
"""

from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime
from typing import Any

from sqlalchemy import delete, insert, select

from statusboard.core.domain_types import ProjectId, UserId
from statusboard.core.records import ProjectRecord
from statusboard.models.project import (
    Project, ProjectMember, ROLE_PARTICIPANT, ROLE_INVITEE,
)
from statusboard.stores.base import SqlStore, as_utc, _matches_nothing

_MEMBER_FILTERS = {
    "participant_ids": (ROLE_PARTICIPANT,),
    "invited_ids": (ROLE_INVITEE,),
    "member_id": (ROLE_PARTICIPANT, ROLE_INVITEE),
}


class SqlProjectStore(SqlStore[Project, ProjectRecord]):
    model = Project
    resource_type = "Project"
    writable_fields = frozenset({
        "project_name", "active", "tags", "scheduled_updates",
        "participant_ids", "invited_ids",
    })

    def clause(self, key: str, value: Any):
        roles = _MEMBER_FILTERS.get(key)
        if roles is None:
            return super().clause(key, value)
        members = select(ProjectMember.project_id).where(
            ProjectMember.role.in_(roles),
        )
        if isinstance(value, (list, tuple, set, frozenset)):
            members = members.where(ProjectMember.user_id.in_(list(value)))
        else:
            members = members.where(ProjectMember.user_id == value)
        return Project.id.in_(members)

    def to_record(self, row: Project, members: list = ()) -> ProjectRecord:
        return ProjectRecord(
            id=ProjectId(row.id),
            project_name=row.project_name,
            creator_id=UserId(row.creator_id),
            participant_ids=tuple(
                UserId(m.user_id) for m in members if m.role == ROLE_PARTICIPANT
            ),
            invited_ids=tuple(
                UserId(m.user_id) for m in members if m.role == ROLE_INVITEE
            ),
            tags=tuple(row.tags or ()),
            active=row.active,
            scheduled_updates=tuple(
                as_utc(datetime.fromisoformat(d)) for d in row.scheduled_updates or ()
            ),
            created_at=as_utc(row.created_at),
        )

    def to_row(self, record: ProjectRecord) -> Project:
        return Project(
            id=record.id,
            project_name=record.project_name,
            creator_id=record.creator_id,
            active=record.active,
            tags=list(record.tags),
            scheduled_updates=[d.isoformat() for d in record.scheduled_updates],
        )

    def to_values(self, patch: Mapping[str, Any]) -> dict:
        values = {
            k: v for k, v in patch.items()
            if k not in ("participant_ids", "invited_ids")
        }
        if "tags" in values:
            values["tags"] = list(values["tags"])
        if "scheduled_updates" in values:
            values["scheduled_updates"] = [
                d.isoformat() for d in values["scheduled_updates"]
            ]
        return values

    def describe(self, record: ProjectRecord) -> str:
        return f"project {record.id}"

    async def find_many(self, filter: Mapping[str, Any]) -> list[ProjectRecord]:
        query = (
            select(Project)
            .where(*self.where(filter))
            .order_by(Project.created_at)
            .execution_options(populate_existing=True)
        )
        async with self.guard("find"):
            rows = (await self.db.execute(query)).scalars().all()
            members = await self._members_of([row.id for row in rows])
        return [self.to_record(row, members.get(row.id, [])) for row in rows]

    async def insert(self, record: ProjectRecord) -> ProjectRecord:
        row = self.to_row(record)
        async with self.guard("insert", write=True, key=self.describe(record)):
            self.db.add(row)
            await self.db.flush()
            await self._add_members(row.id, record.participant_ids, record.invited_ids)
            created_at = row.created_at
        return replace(record, created_at=as_utc(created_at))

    async def update_one(
        self, record_id: ProjectId, patch: Mapping[str, Any],
    ) -> ProjectRecord | None:
        if "participant_ids" in patch or "invited_ids" in patch:
            current = await self.find(record_id)
            if current is None:
                return None
            participants = patch.get("participant_ids", current.participant_ids)
            invitees = patch.get("invited_ids", current.invited_ids)
            async with self.guard("update", write=True, key=f"project {record_id}"):
                await self.db.execute(
                    delete(ProjectMember)
                    .where(ProjectMember.project_id == record_id)
                    .execution_options(synchronize_session=False),
                )
                await self._add_members(record_id, participants, invitees)
        return await super().update_one(record_id, patch)

    async def remove_member(self, project_ids, user_id: UserId) -> int:
        """Drop user_id from participants and invitees of the given projects.

        Returns the number of projects the user was removed from.
        """
        project_ids = list(project_ids)
        if not project_ids:
            return 0
        statement = (
            delete(ProjectMember)
            .where(
                ProjectMember.project_id.in_(project_ids),
                ProjectMember.user_id == user_id,
            )
            .execution_options(synchronize_session=False)
        )
        async with self.guard("remove_member", write=True):
            result = await self.db.execute(statement)
        return result.rowcount or 0

    async def delete_many(self, filter: Mapping[str, Any]) -> int:
        if _matches_nothing(filter):
            return 0
        async with self.guard("delete", write=True):
            ids = (await self.db.execute(
                select(Project.id).where(*self.where(filter)),
            )).scalars().all()
            if not ids:
                return 0
            await self.db.execute(
                delete(ProjectMember)
                .where(ProjectMember.project_id.in_(ids))
                .execution_options(synchronize_session=False),
            )
            result = await self.db.execute(
                delete(Project)
                .where(Project.id.in_(ids))
                .execution_options(synchronize_session=False),
            )
        return result.rowcount or 0

    async def _members_of(self, project_ids: list) -> dict:
        if not project_ids:
            return {}
        result = await self.db.execute(
            select(
                ProjectMember.project_id, ProjectMember.user_id,
                ProjectMember.role,
            )
            .where(ProjectMember.project_id.in_(project_ids))
            .order_by(ProjectMember.position),
        )
        grouped: dict = {}
        for member in result.all():
            grouped.setdefault(member.project_id, []).append(member)
        return grouped

    async def _add_members(self, project_id, participant_ids, invited_ids) -> None:
        rows = [
            {"project_id": project_id, "user_id": user_id,
             "role": ROLE_PARTICIPANT, "position": position}
            for position, user_id in enumerate(participant_ids)
        ] + [
            {"project_id": project_id, "user_id": user_id,
             "role": ROLE_INVITEE, "position": position}
            for position, user_id in enumerate(invited_ids)
        ]
        if rows:
            await self.db.execute(insert(ProjectMember), rows)
