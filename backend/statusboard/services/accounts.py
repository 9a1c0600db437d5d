"""Accounts: sign-up, sign-in, sessions and profile edits.

Invariants:
    - Passwords are hashed with passlib before they reach a store
    - Emails are unique case-insensitively
    - Expired sessions are deleted when presented
"""

import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone

from passlib.context import CryptContext

from statusboard.core.domain_types import UserId
from statusboard.core.errors import (
    DuplicateRecordError, NotAuthenticatedError, ResourceNotFoundError,
)
from statusboard.core.records import SessionRecord, UserRecord
from statusboard.core.repository_protocols import StoreSet

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


class AccountService:
    """User identity and session lifecycle."""

    def __init__(self, stores: StoreSet, session_ttl: timedelta):
        self.stores = stores
        self.session_ttl = session_ttl

    async def sign_up(
        self, first_name: str, last_name: str, email: str, password: str,
    ) -> tuple[UserRecord, SessionRecord]:
        email = email.strip().lower()
        if await self.stores.users.find_by_email(email):
            raise DuplicateRecordError("User", f"email '{email}'")
        user = await self.stores.users.insert(UserRecord(
            id=UserId(uuid.uuid4()),
            email=email,
            first_name=first_name,
            last_name=last_name,
            password_hash=hash_password(password),
        ))
        logger.info("User signed up", extra={"user_id": str(user.id)})
        return user, await self.open_session(user.id)

    async def sign_in(self, email: str, password: str) -> tuple[UserRecord, SessionRecord]:
        user = await self.stores.users.find_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise NotAuthenticatedError("Invalid email or password.")
        return user, await self.open_session(user.id)

    async def open_session(self, user_id: UserId) -> SessionRecord:
        now = datetime.now(timezone.utc)
        return await self.stores.sessions.insert(SessionRecord(
            token=secrets.token_urlsafe(32),
            user_id=user_id,
            created_at=now,
            expires_at=now + self.session_ttl,
        ))

    async def sign_out(self, token: str) -> None:
        await self.stores.sessions.delete_one(token)

    async def user_for_token(self, token: str) -> UserRecord | None:
        session = await self.stores.sessions.find(token)
        if session is None:
            return None
        if session.expires_at <= datetime.now(timezone.utc):
            await self.stores.sessions.delete_one(token)
            return None
        return await self.stores.users.find(session.user_id)

    async def edit_profile(self, user_id: UserId, changes: dict) -> UserRecord:
        patch = {k: v for k, v in changes.items() if v is not None}
        if "email" in patch:
            patch["email"] = patch["email"].strip().lower()
            existing = await self.stores.users.find_by_email(patch["email"])
            if existing and existing.id != user_id:
                raise DuplicateRecordError("User", f"email '{patch['email']}'")
        if "password" in patch:
            patch["password_hash"] = hash_password(patch.pop("password"))
        user = await self.stores.users.update_one(user_id, patch)
        if user is None:
            raise ResourceNotFoundError("User", str(user_id))
        return user
