"""Project service: membership moves and invitation rules."""

from uuid import uuid4

import pytest

from statusboard.core.domain_types import InviteResponse
from statusboard.core.errors import (
    InputValidationError, PermissionDeniedError, ResourceNotFoundError,
)
from statusboard.core.records import UserRecord
from statusboard.services.projects import ProjectService

from tests.services.memory_stores import build_memory_stores


@pytest.fixture
async def setup():
    stores, _, _ = build_memory_stores()
    users = {}
    for name in ("ann", "bob", "cat"):
        users[name] = await stores.users.insert(UserRecord(
            uuid4(), f"{name}@example.com", name.title(), "Test", "h",
        ))
    return ProjectService(stores), users


async def test_creator_is_never_invited_to_own_project(setup):
    service, users = setup
    project = await service.create_project(
        users["ann"], "Apollo", ["ann@example.com", "BOB@example.com", "bob@example.com"],
    )
    assert project.participant_ids == (users["ann"].id,)
    assert project.invited_ids == (users["bob"].id,)


async def test_unknown_invitee_email(setup):
    service, users = setup
    with pytest.raises(ResourceNotFoundError):
        await service.create_project(users["ann"], "Apollo", ["ghost@example.com"])


async def test_invite_rules(setup):
    service, users = setup
    project = await service.create_project(users["ann"], "Apollo")
    with pytest.raises(PermissionDeniedError):
        await service.invite(project.id, users["bob"].id, "cat@example.com")
    with pytest.raises(InputValidationError):
        await service.invite(project.id, users["ann"].id, "ann@example.com")
    invited = await service.invite(project.id, users["ann"].id, "bob@example.com")
    again = await service.invite(project.id, users["ann"].id, "bob@example.com")
    assert invited.invited_ids == again.invited_ids == (users["bob"].id,)


async def test_accept_moves_user_between_sets(setup):
    service, users = setup
    project = await service.create_project(users["ann"], "Apollo", ["bob@example.com"])
    accepted = await service.respond_to_invite(
        project.id, users["bob"].id, InviteResponse.ACCEPT,
    )
    assert accepted.participant_ids == (users["ann"].id, users["bob"].id)
    assert accepted.invited_ids == ()
    with pytest.raises(PermissionDeniedError):
        await service.respond_to_invite(project.id, users["bob"].id, InviteResponse.ACCEPT)


async def test_edit_project_cleans_tags_and_is_creator_only(setup):
    service, users = setup
    project = await service.create_project(users["ann"], "Apollo", ["bob@example.com"])
    with pytest.raises(PermissionDeniedError):
        await service.edit_project(project.id, users["bob"].id, {"active": False})
    edited = await service.edit_project(
        project.id, users["ann"].id, {"tags": [" Ops", "ops", ""], "active": False},
    )
    assert edited.tags == ("ops",)
    assert edited.active is False
