"""Session Store: user_sessions table, keyed by token."""

from statusboard.core.domain_types import UserId
from statusboard.core.records import SessionRecord
from statusboard.models.user_session import UserSession
from statusboard.stores.base import SqlStore, as_utc


class SqlSessionStore(SqlStore[UserSession, SessionRecord]):
    model = UserSession
    resource_type = "Session"
    key_column = "token"

    def to_record(self, row: UserSession) -> SessionRecord:
        return SessionRecord(
            token=row.token,
            user_id=UserId(row.user_id),
            created_at=as_utc(row.created_at),
            expires_at=as_utc(row.expires_at),
        )

    def to_row(self, record: SessionRecord) -> UserSession:
        return UserSession(
            token=record.token,
            user_id=record.user_id,
            created_at=record.created_at,
            expires_at=record.expires_at,
        )

    def describe(self, record: SessionRecord) -> str:
        return "token"
