"""Project routes: creation, invitations and project deletion."""


async def _create(client, owner, **extra):
    res = await client.post("/api/v1/projects", json={
        "project_name": "Apollo", **extra,
    }, headers=owner["headers"])
    assert res.status_code == 201, res.text
    return res.json()


async def test_create_project_makes_creator_sole_participant(client, sign_up):
    ann = await sign_up("ann")
    await sign_up("bob")
    body = await _create(
        client, ann, invited_users=["bob@example.com"],
        tags=["Foo", " foo ", "BAR"],
        scheduled_updates=["2022-12-14T15:04:00Z"],
    )
    assert body["role"] == "creator"
    assert body["participants"] == ["ann@example.com"]
    assert body["invited_users"] == ["bob@example.com"]
    assert body["tags"] == ["foo", "bar"]
    assert body["scheduled_updates"] == ["December 14th 2022, 3:04 pm"]


async def test_inviting_unknown_email_is_404(client, sign_up):
    ann = await sign_up("ann")
    res = await client.post("/api/v1/projects", json={
        "project_name": "Apollo", "invited_users": ["ghost@example.com"],
    }, headers=ann["headers"])
    assert res.status_code == 404


async def test_accept_invitation_moves_user_and_flags_existing_updates(client, sign_up):
    ann, bob = await sign_up("ann"), await sign_up("bob")
    project = await _create(client, ann, invited_users=["bob@example.com"])
    await client.post(f"/api/v1/projects/{project['id']}/updates", json={
        "status": "green", "summary": "Day one", "details": "Setup",
    }, headers=ann["headers"])

    invites = await client.get("/api/v1/projects/invites", headers=bob["headers"])
    assert [p["id"] for p in invites.json()] == [project["id"]]
    assert invites.json()[0]["role"] == "invitee"

    res = await client.post(
        f"/api/v1/projects/{project['id']}/invites/response",
        json={"response": "accept"}, headers=bob["headers"],
    )
    assert res.status_code == 200
    assert res.json()["role"] == "participant"
    assert res.json()["participants"] == ["ann@example.com", "bob@example.com"]
    assert "invited_users" not in res.json()

    flags = await client.get("/api/v1/eyes-wanted", headers=bob["headers"])
    assert len(flags.json()) == 1


async def test_decline_invitation_removes_invite(client, sign_up):
    ann, bob = await sign_up("ann"), await sign_up("bob")
    project = await _create(client, ann, invited_users=["bob@example.com"])
    await client.post(
        f"/api/v1/projects/{project['id']}/invites/response",
        json={"response": "decline"}, headers=bob["headers"],
    )
    admin = await client.get(
        f"/api/v1/projects/{project['id']}/admin", headers=ann["headers"],
    )
    assert admin.json()["invited_users"] == []
    assert admin.json()["participants"] == ["ann@example.com"]


async def test_outsider_cannot_see_project(client, sign_up):
    ann, eve = await sign_up("ann"), await sign_up("eve")
    project = await _create(client, ann)
    res = await client.get(f"/api/v1/projects/{project['id']}", headers=eve["headers"])
    assert res.status_code == 403


async def test_only_creator_deletes_project(client, sign_up):
    ann, bob = await sign_up("ann"), await sign_up("bob")
    project = await _create(client, ann, invited_users=["bob@example.com"])
    res = await client.delete(f"/api/v1/projects/{project['id']}", headers=bob["headers"])
    assert res.status_code == 403

    res = await client.delete(f"/api/v1/projects/{project['id']}", headers=ann["headers"])
    assert res.status_code == 200
    assert res.json()["deleted"]["projects"] == 1

    res = await client.delete(f"/api/v1/projects/{project['id']}", headers=ann["headers"])
    assert res.status_code == 200
    assert res.json()["deleted"]["projects"] == 0
