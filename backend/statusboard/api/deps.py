"""API Dependencies: per-request stores, services and the signed-in user.

Invariants:
    - One StoreSet per request, sharing the request's AsyncSession
    - The session token travels as `Authorization: Bearer <token>`
    - A missing, unknown or expired token is NotAuthenticatedError (401)
"""

from datetime import timedelta

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from statusboard.config import get_settings
from statusboard.core.errors import NotAuthenticatedError
from statusboard.core.records import UserRecord
from statusboard.core.repository_protocols import StoreSet
from statusboard.infrastructure.database import get_db
from statusboard.services.accounts import AccountService
from statusboard.services.cascade_orchestrator import CascadeOrchestrator
from statusboard.services.population import Populator
from statusboard.services.projects import ProjectService
from statusboard.services.reactions import ReactionService
from statusboard.services.updates import UpdateService
from statusboard.stores import build_sql_stores


async def get_stores(db: AsyncSession = Depends(get_db)) -> StoreSet:
    return build_sql_stores(db)


async def get_account_service(
    stores: StoreSet = Depends(get_stores),
) -> AccountService:
    ttl = timedelta(hours=get_settings().session_ttl_hours)
    return AccountService(stores, ttl)


async def get_session_token(authorization: str | None = Header(None)) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise NotAuthenticatedError()
    return token.strip()


async def get_current_user(
    token: str = Depends(get_session_token),
    accounts: AccountService = Depends(get_account_service),
) -> UserRecord:
    user = await accounts.user_for_token(token)
    if user is None:
        raise NotAuthenticatedError("Your session has expired. Sign in again.")
    return user


async def get_orchestrator(
    stores: StoreSet = Depends(get_stores),
) -> CascadeOrchestrator:
    return CascadeOrchestrator(stores)


async def get_reaction_service(
    stores: StoreSet = Depends(get_stores),
) -> ReactionService:
    return ReactionService(stores)


async def get_project_service(
    stores: StoreSet = Depends(get_stores),
    orchestrator: CascadeOrchestrator = Depends(get_orchestrator),
    reactions: ReactionService = Depends(get_reaction_service),
) -> ProjectService:
    return ProjectService(stores, orchestrator, reactions)


async def get_update_service(
    stores: StoreSet = Depends(get_stores),
    orchestrator: CascadeOrchestrator = Depends(get_orchestrator),
    reactions: ReactionService = Depends(get_reaction_service),
) -> UpdateService:
    return UpdateService(stores, orchestrator, reactions)


async def get_populator(stores: StoreSet = Depends(get_stores)) -> Populator:
    return Populator(stores)
