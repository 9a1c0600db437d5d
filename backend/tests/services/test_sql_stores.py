"""SQL stores against in-memory SQLite: the six-operation contract.

Invariants:
    - Deletes report how many rows went away; missing rows report 0
    - Unique pairs and emails surface as DuplicateRecordError
    - Foreign-key violations surface as StoreFailureError, never as a conflict
    - Project member sets round-trip in order and are filterable by user
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from statusboard.core.domain_types import CascadeStep, InviteResponse
from statusboard.core.errors import DuplicateRecordError, StoreFailureError
from statusboard.core.records import (
    EyesWantedRecord, ProjectRecord, ThanksRecord, UpdateRecord, UserRecord,
)
from statusboard.services.cascade_orchestrator import CascadeOrchestrator
from statusboard.services.projects import ProjectService
from statusboard.services.relationship_resolver import RelationshipResolver
from statusboard.stores.base import is_unique_violation


async def _user(stores, name):
    return await stores.users.insert(UserRecord(
        id=uuid4(), email=f"{name}@Example.com", first_name=name,
        last_name="Test", password_hash="h",
    ))


async def _project(stores, creator, participants=(), invited=(), **kw):
    return await stores.projects.insert(ProjectRecord(
        id=uuid4(), project_name="Apollo", creator_id=creator.id,
        participant_ids=(creator.id, *(u.id for u in participants)),
        invited_ids=tuple(u.id for u in invited), **kw,
    ))


async def _update(stores, project, author):
    return await stores.updates.insert(UpdateRecord(
        id=uuid4(), project_id=project.id, author_id=author.id,
        status="green", summary="s", details="d",
    ))


# --- users ---------------------------------------------------------------------

async def test_user_email_is_stored_lowercase_and_found_case_insensitively(sql_stores):
    user = await _user(sql_stores, "ann")
    assert user.email == "ann@example.com"
    assert user.created_at is not None
    found = await sql_stores.users.find_by_email("  ANN@example.COM ")
    assert found.id == user.id


async def test_duplicate_email_is_a_conflict(sql_stores):
    await _user(sql_stores, "ann")
    with pytest.raises(DuplicateRecordError):
        await _user(sql_stores, "ANN")


async def test_update_one_on_missing_record_returns_none(sql_stores):
    assert await sql_stores.users.update_one(uuid4(), {"first_name": "x"}) is None


async def test_update_one_rejects_unknown_fields(sql_stores):
    user = await _user(sql_stores, "ann")
    with pytest.raises(ValueError):
        await sql_stores.users.update_one(user.id, {"id": uuid4()})


async def test_unknown_filter_key_is_rejected(sql_stores):
    with pytest.raises(ValueError):
        await sql_stores.users.find_many({"nickname": "x"})


# --- deletes -------------------------------------------------------------------

async def test_delete_counts_and_missing_is_zero(sql_stores):
    a, b = await _user(sql_stores, "a"), await _user(sql_stores, "b")
    assert await sql_stores.users.delete_many({"id": [a.id, b.id, uuid4()]}) == 2
    assert await sql_stores.users.delete_one(a.id) == 0


async def test_empty_in_filter_deletes_nothing(sql_stores):
    await _user(sql_stores, "a")
    assert await sql_stores.users.delete_many({"id": []}) == 0
    assert len(await sql_stores.users.find_many({})) == 1


# --- projects ------------------------------------------------------------------

async def test_project_members_round_trip_in_order(sql_stores):
    ann, bob, cat, dan = [await _user(sql_stores, n) for n in ("ann", "bob", "cat", "dan")]
    when = datetime(2022, 12, 14, 15, 4, tzinfo=timezone.utc)
    project = await _project(
        sql_stores, ann, [cat, bob], [dan],
        tags=("ops", "web"), scheduled_updates=(when,),
    )
    found = await sql_stores.projects.find(project.id)
    assert found.participant_ids == (ann.id, cat.id, bob.id)
    assert found.invited_ids == (dan.id,)
    assert found.tags == ("ops", "web")
    assert found.scheduled_updates == (when,)
    assert found.created_at is not None


async def test_project_filters_by_member(sql_stores):
    ann, bob, cat = [await _user(sql_stores, n) for n in ("ann", "bob", "cat")]
    p1 = await _project(sql_stores, ann, [bob])
    p2 = await _project(sql_stores, cat, [], [bob])
    participating = await sql_stores.projects.find_many({"participant_ids": bob.id})
    invited = await sql_stores.projects.find_many({"invited_ids": bob.id})
    member = await sql_stores.projects.find_many({"member_id": bob.id})
    assert [p.id for p in participating] == [p1.id]
    assert [p.id for p in invited] == [p2.id]
    assert {p.id for p in member} == {p1.id, p2.id}


async def test_project_member_patch_rewrites_member_rows(sql_stores):
    ann, bob, cat = [await _user(sql_stores, n) for n in ("ann", "bob", "cat")]
    project = await _project(sql_stores, ann, [bob], [cat])
    edited = await sql_stores.projects.update_one(project.id, {
        "participant_ids": (ann.id, bob.id, cat.id), "invited_ids": (),
        "project_name": "Gemini",
    })
    assert edited.participant_ids == (ann.id, bob.id, cat.id)
    assert edited.invited_ids == ()
    assert edited.project_name == "Gemini"


async def test_project_delete_removes_member_rows(sql_stores):
    ann, bob = await _user(sql_stores, "ann"), await _user(sql_stores, "bob")
    project = await _project(sql_stores, ann, [bob])
    assert await sql_stores.projects.delete_one(project.id) == 1
    assert await sql_stores.projects.find_many({"member_id": bob.id}) == []


# --- reactions -----------------------------------------------------------------

async def test_thanks_are_unique_per_user_and_update(sql_stores):
    ann = await _user(sql_stores, "ann")
    update = await _update(sql_stores, await _project(sql_stores, ann), ann)
    await sql_stores.thanks.insert(ThanksRecord(uuid4(), ann.id, update.id))
    with pytest.raises(DuplicateRecordError):
        await sql_stores.thanks.insert(ThanksRecord(uuid4(), ann.id, update.id))
    assert len(await sql_stores.thanks.find_many({"update_id": update.id})) == 1


async def test_eyes_wanted_are_unique_per_user_and_update(sql_stores):
    ann = await _user(sql_stores, "ann")
    update = await _update(sql_stores, await _project(sql_stores, ann), ann)
    await sql_stores.eyes_wanted.insert(EyesWantedRecord(uuid4(), ann.id, update.id))
    with pytest.raises(DuplicateRecordError):
        await sql_stores.eyes_wanted.insert(EyesWantedRecord(uuid4(), ann.id, update.id))


# --- cascade over SQL ----------------------------------------------------------

async def test_user_cascade_over_sql_stores(sql_stores):
    ann, bob = await _user(sql_stores, "ann"), await _user(sql_stores, "bob")
    owned = await _project(sql_stores, ann, [bob])
    joined = await _project(sql_stores, bob, [ann])
    mine = await _update(sql_stores, owned, bob)
    theirs = await _update(sql_stores, joined, bob)
    await sql_stores.thanks.insert(ThanksRecord(uuid4(), ann.id, theirs.id))
    await sql_stores.eyes_wanted.insert(EyesWantedRecord(uuid4(), ann.id, mine.id))

    summary = await CascadeOrchestrator(sql_stores).delete_user(ann.id)

    assert summary.to_response() == {
        "success": True,
        "deleted": {
            "eyes_wanted": 1, "thanks": 1, "updates": 1,
            "projects": 1, "users": 1,
        },
        "memberships_removed": 1,
    }
    remaining = await sql_stores.projects.find(joined.id)
    assert remaining.participant_ids == (bob.id,)
    assert [u.id for u in await sql_stores.updates.find_many({})] == [theirs.id]
    assert await sql_stores.thanks.find_many({}) == []

    again = await CascadeOrchestrator(sql_stores).delete_user(ann.id)
    assert again.total_affected == 0


class _AfterResolve(RelationshipResolver):
    """Runs `between` once the user plan is built, before any step mutates."""

    def __init__(self, stores, between):
        super().__init__(stores)
        self.between = between

    async def resolve_for_user_deletion(self, user_id):
        plan = await super().resolve_for_user_deletion(user_id)
        await self.between()
        return plan


async def test_remove_member_only_touches_that_user(sql_stores):
    ann, bob, cat, dan = [await _user(sql_stores, n) for n in ("ann", "bob", "cat", "dan")]
    first = await _project(sql_stores, ann, [bob, cat], [dan])
    second = await _project(sql_stores, cat, [], [bob])
    untouched = await _project(sql_stores, dan, [bob])

    removed = await sql_stores.projects.remove_member([first.id, second.id], bob.id)

    assert removed == 2
    assert (await sql_stores.projects.find(first.id)).participant_ids == (ann.id, cat.id)
    assert (await sql_stores.projects.find(first.id)).invited_ids == (dan.id,)
    assert (await sql_stores.projects.find(second.id)).invited_ids == ()
    assert (await sql_stores.projects.find(untouched.id)).participant_ids == (dan.id, bob.id)
    assert await sql_stores.projects.remove_member([first.id], bob.id) == 0


async def test_accept_committed_mid_cascade_survives_membership_removal(sql_stores):
    ann, bob, cat = [await _user(sql_stores, n) for n in ("ann", "bob", "cat")]
    project = await _project(sql_stores, bob, [ann], [cat])

    async def cat_accepts():
        await ProjectService(sql_stores).respond_to_invite(
            project.id, cat.id, InviteResponse.ACCEPT,
        )

    resolver = _AfterResolve(sql_stores, cat_accepts)
    summary = await CascadeOrchestrator(sql_stores, resolver).delete_user(ann.id)

    after = await sql_stores.projects.find(project.id)
    assert summary.memberships_removed == 1
    assert after.participant_ids == (bob.id, cat.id)
    assert after.invited_ids == ()


# --- foreign keys --------------------------------------------------------------

async def test_insert_with_unknown_parent_is_a_store_failure(sql_stores):
    ann = await _user(sql_stores, "ann")
    with pytest.raises(StoreFailureError) as exc_info:
        await sql_stores.updates.insert(UpdateRecord(
            id=uuid4(), project_id=uuid4(), author_id=ann.id,
            status="green", summary="s", details="d",
        ))
    assert exc_info.value.operation == "insert"
    assert await sql_stores.updates.find_many({}) == []


async def test_deleting_a_referenced_user_is_a_store_failure(sql_stores):
    ann = await _user(sql_stores, "ann")
    await _project(sql_stores, ann)
    with pytest.raises(StoreFailureError):
        await sql_stores.users.delete_one(ann.id)
    assert await sql_stores.users.find(ann.id) is not None


async def test_update_posted_mid_cascade_halts_at_user_delete(sql_stores):
    ann, bob = await _user(sql_stores, "ann"), await _user(sql_stores, "bob")
    joined = await _project(sql_stores, bob, [ann])

    async def ann_posts():
        await _update(sql_stores, joined, ann)

    resolver = _AfterResolve(sql_stores, ann_posts)
    with pytest.raises(StoreFailureError) as exc_info:
        await CascadeOrchestrator(sql_stores, resolver).delete_user(ann.id)

    assert exc_info.value.context.cascade_step == CascadeStep.DELETE_USER.value
    assert await sql_stores.users.find(ann.id) is not None

    summary = await CascadeOrchestrator(sql_stores).delete_user(ann.id)
    assert summary.updates_deleted == 1
    assert summary.users_deleted == 1


class _DriverError(Exception):
    def __init__(self, sqlstate):
        super().__init__(f"constraint violated ({sqlstate})")
        self.sqlstate = sqlstate


@pytest.mark.parametrize("sqlstate, duplicate", [
    ("23505", True),   # unique_violation
    ("23503", False),  # foreign_key_violation
    ("23502", False),  # not_null_violation
])
def test_postgres_sqlstate_decides_conflict_or_failure(sqlstate, duplicate):
    error = IntegrityError("INSERT INTO updates ...", {}, _DriverError(sqlstate))
    assert is_unique_violation(error) is duplicate
