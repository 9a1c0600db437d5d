"""Projects: creation, invitations and membership changes.

Invariants:
    - The creator is the first participant of a new project
    - A user is in at most one of participant_ids / invited_ids of a project;
      accepting moves the user, never copies
    - Only the creator edits or deletes a project; deletion runs the project cascade
    - Tags are stored cleaned (lowercase, trimmed, deduplicated)
"""

import logging
import uuid
from datetime import datetime

from statusboard.core.cascade_plan import CascadeSummary
from statusboard.core.domain_types import InviteResponse, ProjectId, UserId
from statusboard.core.errors import (
    InputValidationError, PermissionDeniedError, ResourceNotFoundError,
)
from statusboard.core.projections import clean_tags
from statusboard.core.records import ProjectRecord, UserRecord
from statusboard.core.repository_protocols import StoreSet
from statusboard.services.cascade_orchestrator import CascadeOrchestrator
from statusboard.services.reactions import ReactionService

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(
        self,
        stores: StoreSet,
        orchestrator: CascadeOrchestrator | None = None,
        reactions: ReactionService | None = None,
    ):
        self.stores = stores
        self.orchestrator = orchestrator or CascadeOrchestrator(stores)
        self.reactions = reactions or ReactionService(stores)

    async def create_project(
        self,
        creator: UserRecord,
        project_name: str,
        invitee_emails: list[str] | None = None,
        tags: list[str] | None = None,
        scheduled_updates: list[datetime] | None = None,
    ) -> ProjectRecord:
        invitees = []
        for email in dict.fromkeys(e.strip().lower() for e in invitee_emails or []):
            user = await self.stores.users.find_by_email(email)
            if user is None:
                raise ResourceNotFoundError("User", email)
            if user.id != creator.id:
                invitees.append(user.id)
        project = await self.stores.projects.insert(ProjectRecord(
            id=ProjectId(uuid.uuid4()),
            project_name=project_name,
            creator_id=creator.id,
            participant_ids=(creator.id,),
            invited_ids=tuple(invitees),
            tags=tuple(clean_tags(tags or [])),
            scheduled_updates=tuple(sorted(scheduled_updates or [])),
        ))
        logger.info(
            f"Project '{project_name}' created",
            extra={"project_id": str(project.id), "user_id": str(creator.id)},
        )
        return project

    async def get_visible(self, project_id: ProjectId, user_id: UserId) -> ProjectRecord:
        """Project the user created, participates in, or is invited to."""
        project = await self._require(project_id)
        if project.creator_id != user_id and not project.has_member(user_id):
            raise PermissionDeniedError("You are not a member of this project.")
        return project

    async def list_participating(self, user_id: UserId) -> list[ProjectRecord]:
        return await self.stores.projects.find_many({"participant_ids": user_id})

    async def list_invitations(self, user_id: UserId) -> list[ProjectRecord]:
        return await self.stores.projects.find_many({"invited_ids": user_id})

    async def invite(
        self, project_id: ProjectId, actor_id: UserId, email: str,
    ) -> ProjectRecord:
        project = await self._require(project_id)
        if not project.has_participant(actor_id):
            raise PermissionDeniedError("Only participants can invite users.")
        user = await self.stores.users.find_by_email(email)
        if user is None:
            raise ResourceNotFoundError("User", email.strip().lower())
        if project.has_participant(user.id):
            raise InputValidationError(
                f"{user.email} is already a participant.", "email",
            )
        if project.has_invitee(user.id):
            return project
        return await self.stores.projects.update_one(
            project.id, {"invited_ids": (*project.invited_ids, user.id)},
        )

    async def respond_to_invite(
        self, project_id: ProjectId, user_id: UserId, response: InviteResponse,
    ) -> ProjectRecord:
        project = await self._require(project_id)
        if not project.has_invitee(user_id):
            raise PermissionDeniedError("You have no invitation to this project.")
        remaining = tuple(u for u in project.invited_ids if u != user_id)
        patch: dict = {"invited_ids": remaining}
        if response is InviteResponse.ACCEPT:
            patch["participant_ids"] = (*project.participant_ids, user_id)
        updated = await self.stores.projects.update_one(project.id, patch)
        if response is InviteResponse.ACCEPT and updated is not None:
            await self.reactions.flag_all_in_project(user_id, updated)
        logger.info(
            f"Invitation {response.value}ed",
            extra={"project_id": str(project_id), "user_id": str(user_id)},
        )
        return updated

    async def edit_project(
        self, project_id: ProjectId, actor_id: UserId, changes: dict,
    ) -> ProjectRecord:
        project = await self._require_creator(project_id, actor_id)
        patch = {k: v for k, v in changes.items() if v is not None}
        if "tags" in patch:
            patch["tags"] = tuple(clean_tags(patch["tags"]))
        if "scheduled_updates" in patch:
            patch["scheduled_updates"] = tuple(sorted(patch["scheduled_updates"]))
        if not patch:
            return project
        return await self.stores.projects.update_one(project.id, patch)

    async def delete_project(
        self, project_id: ProjectId, actor_id: UserId,
    ) -> CascadeSummary:
        project = await self.stores.projects.find(project_id)
        if project is None:
            return CascadeSummary("project", str(project_id))
        if project.creator_id != actor_id:
            raise PermissionDeniedError("Only the creator can delete a project.")
        return await self.orchestrator.delete_project(project.id)

    async def _require(self, project_id: ProjectId) -> ProjectRecord:
        project = await self.stores.projects.find(project_id)
        if project is None:
            raise ResourceNotFoundError("Project", str(project_id))
        return project

    async def _require_creator(
        self, project_id: ProjectId, actor_id: UserId,
    ) -> ProjectRecord:
        project = await self._require(project_id)
        if project.creator_id != actor_id:
            raise PermissionDeniedError("Only the creator can change this project.")
        return project
