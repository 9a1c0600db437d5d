"""Reaction Routes: Thanks and EyesWanted on updates.

Invariants:
    - A second Thanks from the same user on the same update answers 409
    - Flagging EyesWanted is idempotent and always answers the existing flag
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from statusboard.api.deps import get_current_user, get_populator, get_reaction_service
from statusboard.core.projections import eyes_wanted_response, thanks_response
from statusboard.core.records import PopulatedReaction, UserRecord
from statusboard.schemas.update import EyesRequest
from statusboard.services.population import Populator
from statusboard.services.reactions import ReactionService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["reactions"])


@router.post("/updates/{update_id}/thanks", status_code=status.HTTP_201_CREATED)
async def give_thanks(
    update_id: UUID,
    user: UserRecord = Depends(get_current_user),
    reactions: ReactionService = Depends(get_reaction_service),
):
    thanks = await reactions.give_thanks(update_id, user.id)
    return thanks_response(PopulatedReaction(thanks.id, user, thanks.update_id))


@router.delete("/updates/{update_id}/thanks")
async def take_back_thanks(
    update_id: UUID,
    user: UserRecord = Depends(get_current_user),
    reactions: ReactionService = Depends(get_reaction_service),
):
    removed = await reactions.take_back_thanks(update_id, user.id)
    return {"success": True, "deleted": removed}


@router.get("/updates/{update_id}/thanks")
async def list_thanks(
    update_id: UUID,
    user: UserRecord = Depends(get_current_user),
    reactions: ReactionService = Depends(get_reaction_service),
    populator: Populator = Depends(get_populator),
):
    found = await reactions.list_thanks(update_id, user.id)
    populated = await populator.reactions(found, lambda t: t.post_user_id)
    return [thanks_response(t) for t in populated]


@router.post("/updates/{update_id}/eyes", status_code=status.HTTP_201_CREATED)
async def request_eyes(
    update_id: UUID,
    body: EyesRequest,
    user: UserRecord = Depends(get_current_user),
    reactions: ReactionService = Depends(get_reaction_service),
    populator: Populator = Depends(get_populator),
):
    flag = await reactions.request_eyes(update_id, user.id, body.user_id)
    populated = await populator.reactions([flag], lambda e: e.user_id)
    return eyes_wanted_response(populated[0])


@router.delete("/updates/{update_id}/eyes")
async def clear_eyes(
    update_id: UUID,
    user: UserRecord = Depends(get_current_user),
    reactions: ReactionService = Depends(get_reaction_service),
):
    removed = await reactions.clear_eyes(update_id, user.id)
    return {"success": True, "deleted": removed}


@router.get("/eyes-wanted")
async def my_eyes_wanted(
    user: UserRecord = Depends(get_current_user),
    reactions: ReactionService = Depends(get_reaction_service),
):
    found = await reactions.eyes_wanted_for(user.id)
    return [
        eyes_wanted_response(PopulatedReaction(e.id, user, e.update_id))
        for e in found
    ]
