"""User Store: users table behind the UserStore protocol.

Invariants:
    - Emails are lowercased on write and on lookup (case-insensitive uniqueness)
"""

from sqlalchemy import select

from statusboard.core.domain_types import UserId
from statusboard.core.records import UserRecord
from statusboard.models.user import User
from statusboard.stores.base import SqlStore, as_utc


class SqlUserStore(SqlStore[User, UserRecord]):
    model = User
    resource_type = "User"
    writable_fields = frozenset({"email", "first_name", "last_name", "password_hash"})

    def to_record(self, row: User) -> UserRecord:
        return UserRecord(
            id=UserId(row.id),
            email=row.email,
            first_name=row.first_name,
            last_name=row.last_name,
            password_hash=row.password_hash,
            created_at=as_utc(row.created_at),
        )

    def to_row(self, record: UserRecord) -> User:
        return User(
            id=record.id,
            email=record.email.lower(),
            first_name=record.first_name,
            last_name=record.last_name,
            password_hash=record.password_hash,
        )

    def to_values(self, patch):
        values = dict(patch)
        if "email" in values:
            values["email"] = values["email"].lower()
        return values

    def describe(self, record: UserRecord) -> str:
        return f"email '{record.email.lower()}'"

    async def find_by_email(self, email: str) -> UserRecord | None:
        query = (
            select(User)
            .where(User.email == email.strip().lower())
            .execution_options(populate_existing=True)
        )
        async with self.guard("find"):
            row = (await self.db.execute(query)).scalar_one_or_none()
        return self.to_record(row) if row else None
