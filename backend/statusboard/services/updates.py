"""Updates: posting, editing and deleting status updates inside a project.

Invariants:
    - Only participants read or post updates in a project
    - Only the author edits or deletes an update; deletion removes its
      reactions first via the update cascade
    - A new update flags every other participant with EyesWanted
"""

import logging
import uuid
from datetime import datetime, timezone

from statusboard.core.cascade_plan import CascadeSummary
from statusboard.core.domain_types import ProjectId, UpdateId, UserId
from statusboard.core.errors import PermissionDeniedError, ResourceNotFoundError
from statusboard.core.records import ProjectRecord, UpdateRecord
from statusboard.core.repository_protocols import StoreSet
from statusboard.services.cascade_orchestrator import CascadeOrchestrator
from statusboard.services.reactions import ReactionService

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("status", "summary", "details", "todos", "blockers")


class UpdateService:
    def __init__(
        self,
        stores: StoreSet,
        orchestrator: CascadeOrchestrator | None = None,
        reactions: ReactionService | None = None,
    ):
        self.stores = stores
        self.orchestrator = orchestrator or CascadeOrchestrator(stores)
        self.reactions = reactions or ReactionService(stores)

    async def list_for_project(
        self, project_id: ProjectId, viewer_id: UserId,
    ) -> tuple[ProjectRecord, list[UpdateRecord]]:
        project = await self._project_for_participant(project_id, viewer_id)
        updates = await self.stores.updates.find_many({"project_id": project_id})
        updates.sort(key=lambda u: u.created_at, reverse=True)
        return project, updates

    async def post_update(
        self, project_id: ProjectId, author_id: UserId, fields: dict,
    ) -> UpdateRecord:
        project = await self._project_for_participant(project_id, author_id)
        update = await self.stores.updates.insert(UpdateRecord(
            id=UpdateId(uuid.uuid4()),
            project_id=project.id,
            author_id=author_id,
            status=fields["status"],
            summary=fields["summary"],
            details=fields["details"],
            todos=fields.get("todos"),
            blockers=fields.get("blockers"),
        ))
        flagged = await self.reactions.flag_participants(update, project)
        logger.info(
            f"Update posted, {flagged} participants flagged",
            extra={"update_id": str(update.id), "project_id": str(project.id)},
        )
        return update

    async def edit_update(
        self, update_id: UpdateId, actor_id: UserId, changes: dict,
    ) -> UpdateRecord:
        update = await self._require_author(update_id, actor_id)
        patch = {
            k: v for k, v in changes.items()
            if k in EDITABLE_FIELDS and v is not None
        }
        if not patch:
            return update
        patch["modified_at"] = datetime.now(timezone.utc)
        edited = await self.stores.updates.update_one(update.id, patch)
        if edited is None:
            raise ResourceNotFoundError("Update", str(update_id))
        return edited

    async def delete_update(
        self, update_id: UpdateId, actor_id: UserId,
    ) -> CascadeSummary:
        update = await self.stores.updates.find(update_id)
        if update is None:
            return CascadeSummary("update", str(update_id))
        if update.author_id != actor_id:
            raise PermissionDeniedError("Only the author can delete an update.")
        return await self.orchestrator.delete_update(update.id)

    async def _project_for_participant(
        self, project_id: ProjectId, user_id: UserId,
    ) -> ProjectRecord:
        project = await self.stores.projects.find(project_id)
        if project is None:
            raise ResourceNotFoundError("Project", str(project_id))
        if not project.has_participant(user_id):
            raise PermissionDeniedError("You are not a participant of this project.")
        return project

    async def _require_author(self, update_id: UpdateId, actor_id: UserId) -> UpdateRecord:
        update = await self.stores.updates.find(update_id)
        if update is None:
            raise ResourceNotFoundError("Update", str(update_id))
        if update.author_id != actor_id:
            raise PermissionDeniedError("Only the author can change an update.")
        return update
