"""Cascade Orchestrator: executes deletion plans across stores in dependency order.

Invariants:
    - Children before parents: reactions, then updates, then projects, then users
    - Every mutating step is a bulk operation scoped by ids resolved up front
    - Sibling operations inside a step run concurrently and all finish before
      the next step starts
    - Deleting something already gone is a no-op: re-running a cascade on the
      same root reports success with zero records affected
    - A StoreFailureError halts the cascade at the failing step and propagates
      unchanged; applied steps are not rolled back

User cascade order:
    1. resolve  2. reactions on dependent updates  3. dependent updates
    4. the user's own reactions elsewhere  5. owned projects
    6. memberships in other projects  7. the user  8. the user's sessions
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from statusboard.core.cascade_plan import CascadeSummary
from statusboard.core.domain_types import (
    CascadeStep, ProjectId, UpdateId, UserId,
)
from statusboard.core.errors import StoreFailureError
from statusboard.core.repository_protocols import StoreSet
from statusboard.services.relationship_resolver import RelationshipResolver

logger = logging.getLogger(__name__)


class CascadeOrchestrator:
    """Deletes users, projects and updates without leaving dangling references."""

    def __init__(
        self, stores: StoreSet, resolver: RelationshipResolver | None = None,
    ):
        self.stores = stores
        self.resolver = resolver or RelationshipResolver(stores)

    # --- user ---------------------------------------------------------------

    async def delete_user(self, user_id: UserId) -> CascadeSummary:
        stores = self.stores
        summary = CascadeSummary("user", str(user_id))

        async with self._step(summary, CascadeStep.RESOLVE):
            plan = await self.resolver.resolve_for_user_deletion(user_id)

        async with self._step(summary, CascadeStep.DELETE_UPDATE_REACTIONS):
            eyes, thanks = await _gather(
                _delete_ids(stores.eyes_wanted, plan.eyes_on_updates),
                _delete_ids(stores.thanks, plan.thanks_on_updates),
            )
            summary.eyes_wanted_deleted += eyes
            summary.thanks_deleted += thanks

        async with self._step(summary, CascadeStep.DELETE_UPDATES):
            summary.updates_deleted += await _delete_ids(
                stores.updates, plan.update_ids,
            )

        async with self._step(summary, CascadeStep.DELETE_USER_REACTIONS):
            thanks, eyes = await _gather(
                _delete_ids(stores.thanks, plan.own_thanks_elsewhere),
                _delete_ids(stores.eyes_wanted, plan.own_eyes_elsewhere),
            )
            summary.thanks_deleted += thanks
            summary.eyes_wanted_deleted += eyes

        async with self._step(summary, CascadeStep.DELETE_PROJECTS):
            summary.projects_deleted += await _delete_ids(
                stores.projects, plan.owned_project_ids,
            )

        async with self._step(summary, CascadeStep.REMOVE_MEMBERSHIPS):
            if plan.membership_project_ids:
                summary.memberships_removed += await stores.projects.remove_member(
                    plan.membership_project_ids, user_id,
                )

        async with self._step(summary, CascadeStep.DELETE_USER):
            summary.users_deleted += await stores.users.delete_one(user_id)

        async with self._step(summary, CascadeStep.INVALIDATE_SESSIONS):
            summary.sessions_invalidated += await stores.sessions.delete_many(
                {"user_id": user_id},
            )

        self._log_done(summary, user_id=str(user_id))
        return summary

    # --- project ------------------------------------------------------------

    async def delete_project(self, project_id: ProjectId) -> CascadeSummary:
        stores = self.stores
        summary = CascadeSummary("project", str(project_id))

        async with self._step(summary, CascadeStep.RESOLVE):
            plan = await self.resolver.resolve_for_project_deletion(project_id)

        async with self._step(summary, CascadeStep.DELETE_UPDATE_REACTIONS):
            eyes, thanks = await _gather(
                _delete_ids(stores.eyes_wanted, plan.eyes_wanted_ids),
                _delete_ids(stores.thanks, plan.thanks_ids),
            )
            summary.eyes_wanted_deleted += eyes
            summary.thanks_deleted += thanks

        async with self._step(summary, CascadeStep.DELETE_UPDATES):
            summary.updates_deleted += await _delete_ids(
                stores.updates, plan.update_ids,
            )

        async with self._step(summary, CascadeStep.DELETE_PROJECTS):
            summary.projects_deleted += await stores.projects.delete_one(project_id)

        self._log_done(summary, project_id=str(project_id))
        return summary

    # --- single update ------------------------------------------------------

    async def delete_update(self, update_id: UpdateId) -> CascadeSummary:
        stores = self.stores
        summary = CascadeSummary("update", str(update_id))

        async with self._step(summary, CascadeStep.RESOLVE):
            thanks_ids, eyes_ids = await self.resolver.resolve_for_update_deletion(
                update_id,
            )

        async with self._step(summary, CascadeStep.DELETE_UPDATE_REACTIONS):
            eyes, thanks = await _gather(
                _delete_ids(stores.eyes_wanted, eyes_ids),
                _delete_ids(stores.thanks, thanks_ids),
            )
            summary.eyes_wanted_deleted += eyes
            summary.thanks_deleted += thanks

        async with self._step(summary, CascadeStep.DELETE_UPDATES):
            summary.updates_deleted += await stores.updates.delete_one(update_id)

        self._log_done(summary, update_id=str(update_id))
        return summary

    # --- helpers ------------------------------------------------------------

    @asynccontextmanager
    async def _step(self, summary: CascadeSummary, step: CascadeStep):
        try:
            yield
        except StoreFailureError as e:
            e.context.cascade_step = step.value
            logger.error(
                f"Cascade for {summary.root_type} {summary.root_id} halted at "
                f"{step.value} after {len(summary.steps_completed)} steps",
                extra={
                    "cascade_step": step.value,
                    "affected": summary.total_affected,
                    "error_code": e.code,
                },
            )
            raise
        summary.steps_completed.append(step)
        logger.debug(
            f"Cascade for {summary.root_type} {summary.root_id}: {step.value} done",
            extra={"cascade_step": step.value, "affected": summary.total_affected},
        )

    @staticmethod
    def _log_done(summary: CascadeSummary, **ids: str) -> None:
        logger.info(
            f"Cascade for {summary.root_type} {summary.root_id} complete",
            extra={**ids, "affected": summary.total_affected, "summary": summary.to_response()},
        )


async def _delete_ids(store, ids) -> int:
    if not ids:
        return 0
    return await store.delete_many({"id": list(ids)})


async def _gather(*aws):
    """Run sibling operations; wait for all, then raise the first failure."""
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results
