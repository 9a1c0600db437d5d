"""Project Routes: creation, membership and project deletion.

Invariants:
    - Every response is a project_user view for the caller, except the
      creator-only admin view
    - DELETE answers with the project cascade counts
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from statusboard.api.deps import get_current_user, get_populator, get_project_service
from statusboard.core.errors import PermissionDeniedError, ResourceNotFoundError
from statusboard.core.projections import project_admin, project_user
from statusboard.core.records import ProjectRecord, UserRecord
from statusboard.schemas.project import (
    InviteAnswer, InviteRequest, ProjectCreate, ProjectEdit,
)
from statusboard.services.population import Populator
from statusboard.services.projects import ProjectService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects", tags=["projects"])


async def _view(populator: Populator, project: ProjectRecord, viewer: UserRecord) -> dict:
    populated = await populator.project(project)
    if populated is None:
        raise ResourceNotFoundError("Project", str(project.id))
    return project_user(populated, viewer)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    user: UserRecord = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
    populator: Populator = Depends(get_populator),
):
    project = await projects.create_project(
        user, body.project_name,
        invitee_emails=[str(e) for e in body.invited_users],
        tags=body.tags,
        scheduled_updates=body.scheduled_updates,
    )
    return await _view(populator, project, user)


@router.get("")
async def list_my_projects(
    user: UserRecord = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
    populator: Populator = Depends(get_populator),
):
    found = await projects.list_participating(user.id)
    return [project_user(p, user) for p in await populator.projects(found)]


@router.get("/invites")
async def list_my_invitations(
    user: UserRecord = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
    populator: Populator = Depends(get_populator),
):
    found = await projects.list_invitations(user.id)
    return [project_user(p, user) for p in await populator.projects(found)]


@router.get("/{project_id}")
async def get_project(
    project_id: UUID,
    user: UserRecord = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
    populator: Populator = Depends(get_populator),
):
    project = await projects.get_visible(project_id, user.id)
    return await _view(populator, project, user)


@router.get("/{project_id}/admin")
async def get_project_admin(
    project_id: UUID,
    user: UserRecord = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
    populator: Populator = Depends(get_populator),
):
    project = await projects.get_visible(project_id, user.id)
    if project.creator_id != user.id:
        raise PermissionDeniedError("Only the creator can see the admin view.")
    populated = await populator.project(project)
    if populated is None:
        raise ResourceNotFoundError("Project", str(project_id))
    return project_admin(populated)


@router.patch("/{project_id}")
async def edit_project(
    project_id: UUID,
    body: ProjectEdit,
    user: UserRecord = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
    populator: Populator = Depends(get_populator),
):
    project = await projects.edit_project(
        project_id, user.id, body.model_dump(exclude_unset=True),
    )
    return await _view(populator, project, user)


@router.post("/{project_id}/invites")
async def invite_user(
    project_id: UUID,
    body: InviteRequest,
    user: UserRecord = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
    populator: Populator = Depends(get_populator),
):
    project = await projects.invite(project_id, user.id, str(body.email))
    return await _view(populator, project, user)


@router.post("/{project_id}/invites/response")
async def answer_invitation(
    project_id: UUID,
    body: InviteAnswer,
    user: UserRecord = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
    populator: Populator = Depends(get_populator),
):
    project = await projects.respond_to_invite(project_id, user.id, body.response)
    return await _view(populator, project, user)


@router.delete("/{project_id}")
async def delete_project(
    project_id: UUID,
    user: UserRecord = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
):
    summary = await projects.delete_project(project_id, user.id)
    return summary.to_response()
