"""Relationship Resolver: read-only dependency discovery."""

from uuid import uuid4

from statusboard.core.records import (
    ProjectRecord, ThanksRecord, UpdateRecord, UserRecord,
)
from statusboard.services.relationship_resolver import RelationshipResolver

from tests.services.memory_stores import build_memory_stores


async def _seed():
    stores, log, _ = build_memory_stores()
    u = await stores.users.insert(UserRecord(uuid4(), "u@x.io", "U", "U", "h"))
    v = await stores.users.insert(UserRecord(uuid4(), "v@x.io", "V", "V", "h"))
    owned = await stores.projects.insert(ProjectRecord(
        uuid4(), "owned", u.id, participant_ids=(u.id, v.id),
    ))
    joined = await stores.projects.insert(ProjectRecord(
        uuid4(), "joined", v.id, participant_ids=(v.id, u.id),
    ))
    mine_in_owned = await stores.updates.insert(UpdateRecord(
        uuid4(), owned.id, u.id, "ok", "s", "d",
    ))
    theirs_in_joined = await stores.updates.insert(UpdateRecord(
        uuid4(), joined.id, v.id, "ok", "s", "d",
    ))
    thanks = await stores.thanks.insert(ThanksRecord(uuid4(), u.id, theirs_in_joined.id))
    log.clear()
    return stores, log, u, owned, joined, mine_in_owned, theirs_in_joined, thanks


async def test_resolve_for_user_deletion_collects_every_edge():
    stores, _, u, owned, joined, mine, theirs, thanks = await _seed()
    plan = await RelationshipResolver(stores).resolve_for_user_deletion(u.id)

    assert plan.owned_project_ids == {owned.id}
    assert plan.update_ids == {mine.id}
    assert plan.authored_update_ids == {mine.id}
    assert plan.own_thanks_elsewhere == {thanks.id}
    assert [p.id for p in plan.memberships] == [joined.id]


async def test_resolver_never_mutates():
    stores, log, u, owned, *_ = await _seed()
    resolver = RelationshipResolver(stores)
    await resolver.resolve_for_user_deletion(u.id)
    await resolver.resolve_for_project_deletion(owned.id)
    assert {op for _, op, _ in log} <= {"find", "find_many"}


async def test_resolve_for_project_deletion():
    stores, _, u, owned, joined, mine, theirs, thanks = await _seed()
    plan = await RelationshipResolver(stores).resolve_for_project_deletion(joined.id)
    assert plan.update_ids == {theirs.id}
    assert plan.thanks_ids == {thanks.id}
    assert plan.eyes_wanted_ids == frozenset()
