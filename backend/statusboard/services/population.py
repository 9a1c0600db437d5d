"""Population: expands foreign references so the projector can flatten them.

Invariants:
    - One user lookup per batch, never one per record
    - A record whose creator/author no longer exists is skipped and logged
      (possible only while a concurrent cascade is in flight)
"""

import logging
from collections.abc import Iterable

from statusboard.core.records import (
    PopulatedProject, PopulatedReaction, PopulatedUpdate, ProjectRecord,
    UpdateRecord,
)
from statusboard.core.repository_protocols import StoreSet

logger = logging.getLogger(__name__)


class Populator:
    def __init__(self, stores: StoreSet):
        self.stores = stores

    async def users_by_id(self, ids: Iterable) -> dict:
        ids = list(dict.fromkeys(ids))
        if not ids:
            return {}
        users = await self.stores.users.find_many({"id": ids})
        return {u.id: u for u in users}

    async def projects(self, projects: list[ProjectRecord]) -> list[PopulatedProject]:
        users = await self.users_by_id(
            uid for p in projects
            for uid in (p.creator_id, *p.participant_ids, *p.invited_ids)
        )
        populated = []
        for p in projects:
            creator = users.get(p.creator_id)
            if creator is None:
                logger.warning(
                    f"Project {p.id} has no creator record, skipping",
                    extra={"project_id": str(p.id)},
                )
                continue
            populated.append(PopulatedProject(
                project=p,
                creator=creator,
                participants=[users[u] for u in p.participant_ids if u in users],
                invited_users=[users[u] for u in p.invited_ids if u in users],
            ))
        return populated

    async def project(self, project: ProjectRecord) -> PopulatedProject | None:
        populated = await self.projects([project])
        return populated[0] if populated else None

    async def updates(
        self, updates: list[UpdateRecord], projects: dict | None = None,
    ) -> list[PopulatedUpdate]:
        users = await self.users_by_id(u.author_id for u in updates)
        projects = dict(projects or {})
        missing = [u.project_id for u in updates if u.project_id not in projects]
        if missing:
            found = await self.stores.projects.find_many(
                {"id": list(dict.fromkeys(missing))},
            )
            projects.update({p.id: p for p in found})
        populated = []
        for u in updates:
            author, project = users.get(u.author_id), projects.get(u.project_id)
            if author is None or project is None:
                logger.warning(
                    f"Update {u.id} has a dangling reference, skipping",
                    extra={"update_id": str(u.id)},
                )
                continue
            populated.append(PopulatedUpdate(update=u, author=author, project=project))
        return populated

    async def reactions(self, records: list, actor) -> list[PopulatedReaction]:
        """Expand Thanks/EyesWanted; `actor` picks the user id off a record."""
        users = await self.users_by_id(actor(r) for r in records)
        return [
            PopulatedReaction(id=r.id, user=users[actor(r)], update_id=r.update_id)
            for r in records if actor(r) in users
        ]
