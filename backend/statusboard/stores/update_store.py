"""Update Store: updates table behind the UpdateStore protocol."""

from statusboard.core.domain_types import UpdateId, ProjectId, UserId
from statusboard.core.records import UpdateRecord
from statusboard.models.update import Update
from statusboard.stores.base import SqlStore, as_utc


class SqlUpdateStore(SqlStore[Update, UpdateRecord]):
    model = Update
    resource_type = "Update"
    writable_fields = frozenset({
        "status", "summary", "details", "todos", "blockers", "modified_at",
    })

    def to_record(self, row: Update) -> UpdateRecord:
        return UpdateRecord(
            id=UpdateId(row.id),
            project_id=ProjectId(row.project_id),
            author_id=UserId(row.author_id),
            status=row.status,
            summary=row.summary,
            details=row.details,
            todos=row.todos,
            blockers=row.blockers,
            created_at=as_utc(row.created_at),
            modified_at=as_utc(row.modified_at),
        )

    def to_row(self, record: UpdateRecord) -> Update:
        row = Update(
            id=record.id,
            project_id=record.project_id,
            author_id=record.author_id,
            status=record.status,
            summary=record.summary,
            details=record.details,
            todos=record.todos,
            blockers=record.blockers,
        )
        if record.created_at is not None:
            row.created_at = record.created_at
            row.modified_at = record.modified_at or record.created_at
        return row
