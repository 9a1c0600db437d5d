"""Update Routes: status updates inside a project."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from statusboard.api.deps import get_current_user, get_populator, get_update_service
from statusboard.core.errors import ResourceNotFoundError
from statusboard.core.projections import update_response
from statusboard.core.records import UpdateRecord, UserRecord
from statusboard.schemas.update import UpdateCreate, UpdateEdit
from statusboard.services.population import Populator
from statusboard.services.updates import UpdateService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["updates"])


async def _view(populator: Populator, update: UpdateRecord) -> dict:
    populated = await populator.updates([update])
    if not populated:
        raise ResourceNotFoundError("Update", str(update.id))
    return update_response(populated[0])


@router.get("/projects/{project_id}/updates")
async def list_updates(
    project_id: UUID,
    user: UserRecord = Depends(get_current_user),
    updates: UpdateService = Depends(get_update_service),
    populator: Populator = Depends(get_populator),
):
    project, found = await updates.list_for_project(project_id, user.id)
    populated = await populator.updates(found, {project.id: project})
    return [update_response(u) for u in populated]


@router.post("/projects/{project_id}/updates", status_code=status.HTTP_201_CREATED)
async def post_update(
    project_id: UUID,
    body: UpdateCreate,
    user: UserRecord = Depends(get_current_user),
    updates: UpdateService = Depends(get_update_service),
    populator: Populator = Depends(get_populator),
):
    update = await updates.post_update(project_id, user.id, body.model_dump())
    return await _view(populator, update)


@router.patch("/updates/{update_id}")
async def edit_update(
    update_id: UUID,
    body: UpdateEdit,
    user: UserRecord = Depends(get_current_user),
    updates: UpdateService = Depends(get_update_service),
    populator: Populator = Depends(get_populator),
):
    update = await updates.edit_update(
        update_id, user.id, body.model_dump(exclude_unset=True),
    )
    return await _view(populator, update)


@router.delete("/updates/{update_id}")
async def delete_update(
    update_id: UUID,
    user: UserRecord = Depends(get_current_user),
    updates: UpdateService = Depends(get_update_service),
):
    summary = await updates.delete_update(update_id, user.id)
    return summary.to_response()
