"""Reaction Stores: thanks and eyes_wanted tables.

Invariants:
    - Both tables are unique per (user, update); a second insert for the same
      pair raises DuplicateRecordError
"""

from statusboard.core.domain_types import ThanksId, EyesWantedId, UserId, UpdateId
from statusboard.core.records import ThanksRecord, EyesWantedRecord
from statusboard.models.thanks import Thanks
from statusboard.models.eyes_wanted import EyesWanted
from statusboard.stores.base import SqlStore, as_utc


class SqlThanksStore(SqlStore[Thanks, ThanksRecord]):
    model = Thanks
    resource_type = "Thanks"

    def to_record(self, row: Thanks) -> ThanksRecord:
        return ThanksRecord(
            id=ThanksId(row.id),
            post_user_id=UserId(row.post_user_id),
            update_id=UpdateId(row.update_id),
            created_at=as_utc(row.created_at),
        )

    def to_row(self, record: ThanksRecord) -> Thanks:
        return Thanks(
            id=record.id,
            post_user_id=record.post_user_id,
            update_id=record.update_id,
        )

    def describe(self, record: ThanksRecord) -> str:
        return f"user {record.post_user_id} on update {record.update_id}"


class SqlEyesWantedStore(SqlStore[EyesWanted, EyesWantedRecord]):
    model = EyesWanted
    resource_type = "EyesWanted"

    def to_record(self, row: EyesWanted) -> EyesWantedRecord:
        return EyesWantedRecord(
            id=EyesWantedId(row.id),
            user_id=UserId(row.user_id),
            update_id=UpdateId(row.update_id),
            created_at=as_utc(row.created_at),
        )

    def to_row(self, record: EyesWantedRecord) -> EyesWanted:
        return EyesWanted(
            id=record.id,
            user_id=record.user_id,
            update_id=record.update_id,
        )

    def describe(self, record: EyesWantedRecord) -> str:
        return f"user {record.user_id} on update {record.update_id}"
