"""Relationship Resolver: gathers every record that depends on a user or project.

Invariants:
    - Reads only; never mutates a store
    - Update ids are collected from both edges (authorship, project ownership)
      before any reaction lookup, and merged as a set union in core
    - Independent reads are issued concurrently
"""

import asyncio
import logging

from statusboard.core.cascade_plan import (
    ProjectCascadePlan, UserCascadePlan, merge_update_ids,
    plan_project_deletion, plan_user_deletion,
)
from statusboard.core.domain_types import ProjectId, UpdateId, UserId
from statusboard.core.repository_protocols import StoreSet

logger = logging.getLogger(__name__)


class RelationshipResolver:
    """Computes cascade plans from the current store contents."""

    def __init__(self, stores: StoreSet):
        self.stores = stores

    async def resolve_for_user_deletion(self, user_id: UserId) -> UserCascadePlan:
        stores = self.stores
        authored, owned = await asyncio.gather(
            stores.updates.find_many({"author_id": user_id}),
            stores.projects.find_many({"creator_id": user_id}),
        )
        owned_ids = [p.id for p in owned]
        project_updates = (
            await stores.updates.find_many({"project_id": owned_ids})
            if owned_ids else []
        )
        update_ids = list(merge_update_ids(authored, project_updates))

        (
            thanks_on_updates, own_thanks,
            eyes_on_updates, own_eyes, member_projects,
        ) = await asyncio.gather(
            self._by_updates(stores.thanks, update_ids),
            stores.thanks.find_many({"post_user_id": user_id}),
            self._by_updates(stores.eyes_wanted, update_ids),
            stores.eyes_wanted.find_many({"user_id": user_id}),
            stores.projects.find_many({"member_id": user_id}),
        )

        plan = plan_user_deletion(
            user_id,
            authored_updates=authored,
            owned_projects=owned,
            owned_project_updates=project_updates,
            thanks=[*thanks_on_updates, *own_thanks],
            eyes_wanted=[*eyes_on_updates, *own_eyes],
            member_projects=member_projects,
        )
        logger.debug(
            f"Resolved user {user_id}: {len(plan.update_ids)} updates, "
            f"{len(plan.owned_project_ids)} projects, "
            f"{len(plan.memberships)} memberships",
            extra={"user_id": str(user_id)},
        )
        return plan

    async def resolve_for_project_deletion(
        self, project_id: ProjectId,
    ) -> ProjectCascadePlan:
        updates = await self.stores.updates.find_many({"project_id": project_id})
        update_ids = [u.id for u in updates]
        thanks, eyes = await asyncio.gather(
            self._by_updates(self.stores.thanks, update_ids),
            self._by_updates(self.stores.eyes_wanted, update_ids),
        )
        return plan_project_deletion(project_id, updates, thanks, eyes)

    async def resolve_for_update_deletion(
        self, update_id: UpdateId,
    ) -> tuple[frozenset, frozenset]:
        """Thanks ids and EyesWanted ids on a single update."""
        thanks, eyes = await asyncio.gather(
            self.stores.thanks.find_many({"update_id": update_id}),
            self.stores.eyes_wanted.find_many({"update_id": update_id}),
        )
        return frozenset(t.id for t in thanks), frozenset(e.id for e in eyes)

    @staticmethod
    async def _by_updates(store, update_ids: list) -> list:
        if not update_ids:
            return []
        return await store.find_many({"update_id": update_ids})
