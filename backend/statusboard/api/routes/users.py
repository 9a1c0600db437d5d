"""User Routes: accounts, sessions and account deletion.

Invariants:
    - Sign-up and sign-in both answer with a fresh session token
    - DELETE /users runs the full user cascade and reports its counts
"""

import logging

from fastapi import APIRouter, Depends, status

from statusboard.api.deps import (
    get_account_service, get_current_user, get_orchestrator, get_session_token,
)
from statusboard.core.projections import user_response
from statusboard.core.records import SessionRecord, UserRecord
from statusboard.schemas.user import ProfileEdit, SignInRequest, SignUpRequest
from statusboard.services.accounts import AccountService
from statusboard.services.cascade_orchestrator import CascadeOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])


def _session_response(user: UserRecord, session: SessionRecord) -> dict:
    return {
        "token": session.token,
        "expires_at": session.expires_at.isoformat(),
        "user": user_response(user),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def sign_up(
    body: SignUpRequest,
    accounts: AccountService = Depends(get_account_service),
):
    user, session = await accounts.sign_up(
        body.first_name, body.last_name, body.email, body.password,
    )
    return _session_response(user, session)


@router.post("/session")
async def sign_in(
    body: SignInRequest,
    accounts: AccountService = Depends(get_account_service),
):
    user, session = await accounts.sign_in(body.email, body.password)
    return _session_response(user, session)


@router.get("/session")
async def current_session(user: UserRecord = Depends(get_current_user)):
    return user_response(user)


@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(
    token: str = Depends(get_session_token),
    accounts: AccountService = Depends(get_account_service),
):
    await accounts.sign_out(token)


@router.patch("")
async def edit_profile(
    body: ProfileEdit,
    user: UserRecord = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
):
    edited = await accounts.edit_profile(user.id, body.model_dump(exclude_unset=True))
    return user_response(edited)


@router.delete("")
async def delete_account(
    user: UserRecord = Depends(get_current_user),
    orchestrator: CascadeOrchestrator = Depends(get_orchestrator),
):
    summary = await orchestrator.delete_user(user.id)
    return summary.to_response()
