"""
Integration tests for the /community endpoints.

Tests community CRUD, membership rules, announcements, messages and the
delete cascade.
"""

import asyncio
from datetime import datetime

import pytest
from sqlalchemy import func, select

from backend.app.models.community import Announcement, CommunityMember, Message


async def create_community(client, headers, **overrides):
    payload = {"name": "Weekend Hikers", "description": "Short trips near town", **overrides}
    response = await client.post("/community", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def create_trip(client, headers, name="Ridge Walk"):
    response = await client.post(
        "/trip",
        json={"name": name, "description": "Day hike", "startDate": "2026-05-02"},
        headers=headers
    )
    return response.json()["data"][0]


async def count(db_session, model, **filters):
    query = select(func.count(model.id))
    for column, value in filters.items():
        query = query.where(getattr(model, column) == value)
    return (await db_session.execute(query)).scalar()


# TEST 1: Community CRUD
@pytest.mark.asyncio
async def test_requires_identity(client):
    response = await client.get("/community")
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Unauthorized"


@pytest.mark.asyncio
async def test_create_community_enrols_creator_as_admin(client, alice):
    user_id, headers = alice

    community = await create_community(client, headers)

    assert community["createdBy"] == user_id
    assert community["isPrivate"] is False

    response = await client.get(f"/community/{community['id']}", headers=headers)
    members = response.json()["data"]["members"]
    assert [(m["userId"], m["role"]) for m in members] == [(user_id, "admin")]


@pytest.mark.asyncio
async def test_private_community_hidden_from_outsiders(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    public = await create_community(client, alice_headers, name="Open")
    private = await create_community(client, alice_headers, name="Secret", isPrivate=True)

    listing = await client.get("/community", headers=bob_headers)
    assert [c["name"] for c in listing.json()["data"]] == ["Open"]

    own_listing = await client.get("/community", headers=alice_headers)
    assert [c["id"] for c in own_listing.json()["data"]] == [public["id"], private["id"]]

    detail = await client.get(f"/community/{private['id']}", headers=bob_headers)
    assert detail.status_code == 200
    assert detail.json() == {"data": None, "error": None}


@pytest.mark.asyncio
async def test_patch_community_owner_only(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    community = await create_community(client, alice_headers)

    denied = await client.patch(f"/community/{community['id']}", json={"rules": "none"}, headers=bob_headers)
    assert denied.json() == {"data": [], "error": None}

    allowed = await client.patch(
        f"/community/{community['id']}",
        json={"rules": "Leave no trace", "coverImage": "https://img.example/hike.jpg"},
        headers=alice_headers
    )
    updated = allowed.json()["data"][0]
    assert updated["rules"] == "Leave no trace"
    assert updated["coverImage"] == "https://img.example/hike.jpg"
    assert updated["name"] == "Weekend Hikers"


# TEST 2: Memberships
@pytest.mark.asyncio
async def test_join_and_leave(client, alice, bob):
    _, alice_headers = alice
    bob_id, bob_headers = bob
    community = await create_community(client, alice_headers)

    joined = await client.post(f"/community/{community['id']}/members", headers=bob_headers)
    assert joined.status_code == 201
    assert joined.json()["data"]["role"] == "member"
    assert joined.json()["data"]["userId"] == bob_id

    again = await client.post(f"/community/{community['id']}/members", headers=bob_headers)
    assert again.status_code == 409

    left = await client.delete(f"/community/{community['id']}/members/me", headers=bob_headers)
    assert left.status_code == 204

    members = await client.get(f"/community/{community['id']}/members", headers=alice_headers)
    assert bob_id not in [m["userId"] for m in members.json()["data"]]


@pytest.mark.asyncio
async def test_cannot_join_private_community(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    community = await create_community(client, alice_headers, isPrivate=True)

    response = await client.post(f"/community/{community['id']}/members", headers=bob_headers)

    assert response.status_code == 403
    assert response.json()["data"] is None


@pytest.mark.asyncio
async def test_join_missing_community_is_404(client, bob):
    _, headers = bob
    response = await client.post("/community/999/members", headers=headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_only_admins_change_roles(client, alice, bob, make_user):
    _, alice_headers = alice
    bob_id, bob_headers = bob
    carol_id, carol_headers = await make_user("carol")
    community = await create_community(client, alice_headers)
    await client.post(f"/community/{community['id']}/members", headers=bob_headers)
    await client.post(f"/community/{community['id']}/members", headers=carol_headers)

    denied = await client.patch(
        f"/community/{community['id']}/members/{carol_id}",
        json={"role": "moderator"},
        headers=bob_headers
    )
    assert denied.status_code == 403

    promoted = await client.patch(
        f"/community/{community['id']}/members/{bob_id}",
        json={"role": "moderator"},
        headers=alice_headers
    )
    assert promoted.status_code == 200
    assert promoted.json()["data"][0]["role"] == "moderator"


@pytest.mark.asyncio
async def test_unknown_role_rejected(client, alice, bob):
    _, alice_headers = alice
    bob_id, bob_headers = bob
    community = await create_community(client, alice_headers)
    await client.post(f"/community/{community['id']}/members", headers=bob_headers)

    response = await client.patch(
        f"/community/{community['id']}/members/{bob_id}",
        json={"role": "owner"},
        headers=alice_headers
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_last_admin_cannot_demote_self(client, alice):
    alice_id, headers = alice
    community = await create_community(client, headers)

    response = await client.patch(
        f"/community/{community['id']}/members/{alice_id}",
        json={"role": "member"},
        headers=headers
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "ERR_CONFLICT_001"
    members = await client.get(f"/community/{community['id']}/members", headers=headers)
    assert [(m["userId"], m["role"]) for m in members.json()["data"]] == [(alice_id, "admin")]


@pytest.mark.asyncio
async def test_last_admin_cannot_leave(client, alice):
    alice_id, headers = alice
    community = await create_community(client, headers)

    response = await client.delete(f"/community/{community['id']}/members/me", headers=headers)

    assert response.status_code == 409
    members = await client.get(f"/community/{community['id']}/members", headers=headers)
    assert [m["userId"] for m in members.json()["data"]] == [alice_id]


@pytest.mark.asyncio
async def test_admin_can_step_down_once_another_admin_exists(client, alice, bob):
    alice_id, alice_headers = alice
    bob_id, bob_headers = bob
    community = await create_community(client, alice_headers)
    await client.post(f"/community/{community['id']}/members", headers=bob_headers)
    await client.patch(
        f"/community/{community['id']}/members/{bob_id}",
        json={"role": "admin"},
        headers=alice_headers
    )

    demoted = await client.patch(
        f"/community/{community['id']}/members/{alice_id}",
        json={"role": "member"},
        headers=alice_headers
    )
    assert demoted.status_code == 200
    assert demoted.json()["data"][0]["role"] == "member"

    left = await client.delete(f"/community/{community['id']}/members/me", headers=bob_headers)
    assert left.status_code == 409


@pytest.mark.asyncio
async def test_admin_adds_member_to_private_community(client, alice, bob, make_user):
    _, alice_headers = alice
    bob_id, bob_headers = bob
    _, carol_headers = await make_user("carol")
    community = await create_community(client, alice_headers, isPrivate=True)

    added = await client.post(f"/community/{community['id']}/members/{bob_id}", headers=alice_headers)
    assert added.status_code == 201
    assert added.json()["data"]["userId"] == bob_id
    assert added.json()["data"]["role"] == "member"

    again = await client.post(f"/community/{community['id']}/members/{bob_id}", headers=alice_headers)
    assert again.status_code == 409

    detail = await client.get(f"/community/{community['id']}", headers=bob_headers)
    assert detail.json()["data"]["name"] == "Weekend Hikers"

    # a plain member cannot add others
    denied = await client.post(f"/community/{community['id']}/members/carol", headers=bob_headers)
    assert denied.status_code == 403

    # outsiders do not even see the community
    hidden = await client.post(f"/community/{community['id']}/members/carol", headers=carol_headers)
    assert hidden.status_code == 404


@pytest.mark.asyncio
async def test_patch_community_refreshes_updated_at(client, alice):
    _, headers = alice
    community = await create_community(client, headers)
    # CURRENT_TIMESTAMP has one-second resolution on SQLite
    await asyncio.sleep(1.1)

    response = await client.patch(f"/community/{community['id']}", json={"rules": "Be kind"}, headers=headers)

    updated = response.json()["data"][0]
    assert updated["createdAt"] == community["createdAt"]
    assert datetime.fromisoformat(updated["updatedAt"]) > datetime.fromisoformat(community["updatedAt"])


# TEST 3: Announcements and messages
@pytest.mark.asyncio
async def test_announcements_require_moderator_or_admin(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    community = await create_community(client, alice_headers)
    await client.post(f"/community/{community['id']}/members", headers=bob_headers)
    trip = await create_trip(client, alice_headers)

    denied = await client.post(
        f"/community/{community['id']}/announcements",
        json={"content": "Meet at 7"},
        headers=bob_headers
    )
    assert denied.status_code == 403

    posted = await client.post(
        f"/community/{community['id']}/announcements",
        json={"content": "Meet at 7", "tripId": trip["id"]},
        headers=alice_headers
    )
    assert posted.status_code == 201
    assert posted.json()["data"]["tripId"] == trip["id"]

    listing = await client.get(f"/community/{community['id']}/announcements", headers=bob_headers)
    assert [a["content"] for a in listing.json()["data"]] == ["Meet at 7"]


@pytest.mark.asyncio
async def test_messages_members_only(client, alice, bob):
    alice_id, alice_headers = alice
    _, bob_headers = bob
    community = await create_community(client, alice_headers)

    outsider = await client.get(f"/community/{community['id']}/messages", headers=bob_headers)
    assert outsider.status_code == 403

    sent = await client.post(
        f"/community/{community['id']}/messages",
        json={"content": "Who has a stove?"},
        headers=alice_headers
    )
    assert sent.status_code == 201
    assert sent.json()["data"]["senderId"] == alice_id

    await client.post(f"/community/{community['id']}/members", headers=bob_headers)
    listing = await client.get(f"/community/{community['id']}/messages", headers=bob_headers)
    assert [m["content"] for m in listing.json()["data"]] == ["Who has a stove?"]


# TEST 4: Cascades
@pytest.mark.asyncio
async def test_delete_community_cascades(client, alice, bob, db_session):
    _, alice_headers = alice
    _, bob_headers = bob
    community = await create_community(client, alice_headers)
    other = await create_community(client, alice_headers, name="Other")
    trip = await create_trip(client, alice_headers)

    await client.post(f"/community/{community['id']}/members", headers=bob_headers)
    await client.post(
        f"/community/{community['id']}/announcements",
        json={"content": "Trip is on", "tripId": trip["id"]},
        headers=alice_headers
    )
    await client.post(
        f"/community/{community['id']}/messages",
        json={"content": "See you there", "tripId": trip["id"]},
        headers=bob_headers
    )
    await client.post(f"/community/{other['id']}/messages", json={"content": "Unrelated"}, headers=alice_headers)

    response = await client.delete(f"/community/{community['id']}", headers=alice_headers)
    assert response.status_code == 204

    assert await count(db_session, CommunityMember, community_id=community["id"]) == 0
    assert await count(db_session, Announcement, community_id=community["id"]) == 0
    assert await count(db_session, Message, community_id=community["id"]) == 0
    assert await count(db_session, Message, community_id=other["id"]) == 1

    # the trip referenced by the deleted rows is untouched
    trip_response = await client.get(f"/trip/{trip['id']}", headers=alice_headers)
    assert trip_response.json()["data"]["id"] == trip["id"]


@pytest.mark.asyncio
async def test_delete_community_by_non_owner_removes_nothing(client, alice, bob, db_session):
    _, alice_headers = alice
    _, bob_headers = bob
    community = await create_community(client, alice_headers)

    response = await client.delete(f"/community/{community['id']}", headers=bob_headers)

    assert response.status_code == 204
    assert await count(db_session, CommunityMember, community_id=community["id"]) == 1


@pytest.mark.asyncio
async def test_delete_trip_cascades_announcements_but_keeps_messages(client, alice, db_session):
    _, headers = alice
    community = await create_community(client, headers)
    trip = await create_trip(client, headers)
    await client.post(
        f"/community/{community['id']}/announcements",
        json={"content": "Trip is on", "tripId": trip["id"]},
        headers=headers
    )
    await client.post(
        f"/community/{community['id']}/messages",
        json={"content": "Packing list?", "tripId": trip["id"]},
        headers=headers
    )

    response = await client.delete(f"/trip/{trip['id']}", headers=headers)
    assert response.status_code == 204

    assert await count(db_session, Announcement, trip_id=trip["id"]) == 0
    messages = await client.get(f"/community/{community['id']}/messages", headers=headers)
    data = messages.json()["data"]
    assert [m["content"] for m in data] == ["Packing list?"]
    assert data[0]["tripId"] is None
