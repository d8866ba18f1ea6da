"""
Tests for registration endpoints and the per (user, event) status machine.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from campus_compass.models.registration import UserEvent, STATUS_CANCELLED, STATUS_GOING
from campus_compass.services import registration_service


async def _count_registrations(db_session, user_id: int, event_id: str) -> int:
    result = await db_session.execute(
        select(func.count()).select_from(UserEvent).where(
            UserEvent.user_id == user_id, UserEvent.event_id == event_id
        )
    )
    return result.scalar_one()


@pytest.mark.asyncio
async def test_register_going(client: AsyncClient, auth_headers, test_user, test_event):
    response = await client.post(
        "/api/v1/registrations/",
        json={"event_id": test_event.id, "custom_fields": {"dietary": "vegetarian"}},
        headers=auth_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["event_id"] == test_event.id
    assert data["user_id"] == test_user.id
    assert data["status"] == "going"
    assert data["custom_fields"] == {"dietary": "vegetarian"}


@pytest.mark.asyncio
async def test_register_unauthenticated(client: AsyncClient, test_event):
    """Unauthenticated registration returns 401."""
    response = await client.post("/api/v1/registrations/", json={"event_id": test_event.id})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_register_unknown_event(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/v1/registrations/", json={"event_id": "no-such-event"}, headers=auth_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_register_cancel_register_reuses_record(
    client: AsyncClient, db_session, auth_headers, test_user, test_event
):
    """going -> cancelled -> going keeps one record and replaces custom fields."""
    first = await client.post(
        "/api/v1/registrations/",
        json={"event_id": test_event.id, "custom_fields": {"tshirt": "M"}},
        headers=auth_headers,
    )
    cancelled = await client.delete(f"/api/v1/registrations/{test_event.id}", headers=auth_headers)
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"
    assert cancelled.json()["id"] == first.json()["id"]

    again = await client.post(
        "/api/v1/registrations/",
        json={"event_id": test_event.id, "custom_fields": {"major": "CS"}},
        headers=auth_headers,
    )
    assert again.json()["status"] == "going"
    assert again.json()["id"] == first.json()["id"]
    assert again.json()["custom_fields"] == {"major": "CS"}

    assert await _count_registrations(db_session, test_user.id, test_event.id) == 1


@pytest.mark.asyncio
async def test_double_register_keeps_single_record(
    client: AsyncClient, db_session, auth_headers, test_user, test_event
):
    for _ in range(2):
        response = await client.post(
            "/api/v1/registrations/", json={"event_id": test_event.id}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "going"

    assert await _count_registrations(db_session, test_user.id, test_event.id) == 1


@pytest.mark.asyncio
async def test_register_does_not_change_popularity(client: AsyncClient, auth_headers, make_event):
    event = await make_event(popularity=42)
    await client.post("/api/v1/registrations/", json={"event_id": event.id}, headers=auth_headers)

    response = await client.get(f"/api/v1/events/{event.id}")
    assert response.json()["popularity"] == 42


@pytest.mark.asyncio
async def test_cancel_without_registration(
    client: AsyncClient, db_session, auth_headers, test_user, test_event
):
    """Cancelling with no record is a 404 and creates nothing."""
    response = await client.delete(f"/api/v1/registrations/{test_event.id}", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"
    assert await _count_registrations(db_session, test_user.id, test_event.id) == 0


@pytest.mark.asyncio
async def test_interested_then_going(client: AsyncClient, auth_headers, test_event):
    interested = await client.post(
        "/api/v1/registrations/interested", json={"event_id": test_event.id}, headers=auth_headers
    )
    assert interested.status_code == 200
    assert interested.json()["status"] == "interested"

    repeated = await client.post(
        "/api/v1/registrations/interested", json={"event_id": test_event.id}, headers=auth_headers
    )
    assert repeated.status_code == 200
    assert repeated.json()["id"] == interested.json()["id"]

    going = await client.post(
        "/api/v1/registrations/", json={"event_id": test_event.id}, headers=auth_headers
    )
    assert going.json()["status"] == "going"
    assert going.json()["id"] == interested.json()["id"]


@pytest.mark.asyncio
async def test_interested_after_going_conflicts(client: AsyncClient, auth_headers, test_event):
    await client.post("/api/v1/registrations/", json={"event_id": test_event.id}, headers=auth_headers)

    response = await client.post(
        "/api/v1/registrations/interested", json={"event_id": test_event.id}, headers=auth_headers
    )
    assert response.status_code == 409
    assert response.json()["code"] == "conflict"


@pytest.mark.asyncio
async def test_status_query(client: AsyncClient, auth_headers, make_event):
    """Only events with a record appear in the status map."""
    x = await make_event(title="X")
    y = await make_event(title="Y")
    z = await make_event(title="Z")
    await client.post("/api/v1/registrations/", json={"event_id": x.id}, headers=auth_headers)
    await client.post("/api/v1/registrations/", json={"event_id": z.id}, headers=auth_headers)
    await client.delete(f"/api/v1/registrations/{z.id}", headers=auth_headers)

    response = await client.post(
        "/api/v1/registrations/status",
        json={"event_ids": [x.id, y.id, z.id, "unknown"]},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json() == {x.id: "going", z.id: "cancelled"}


@pytest.mark.asyncio
async def test_status_query_empty(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/v1/registrations/status", json={"event_ids": []}, headers=auth_headers
    )
    assert response.json() == {}


@pytest.mark.asyncio
async def test_status_is_per_user(client: AsyncClient, auth_headers, test_event):
    """Another user's registrations never show up."""
    await client.post("/api/v1/registrations/", json={"event_id": test_event.id}, headers=auth_headers)

    signup = await client.post(
        "/api/v1/auth/signup",
        json={"email": "other@ucla.edu", "password": "otherpass123", "university_id": "ucla"},
    )
    other_headers = {"Authorization": f"Bearer {signup.json()['access_token']}"}

    response = await client.post(
        "/api/v1/registrations/status", json={"event_ids": [test_event.id]}, headers=other_headers
    )
    assert response.json() == {}


@pytest.mark.asyncio
async def test_list_registrations(client: AsyncClient, auth_headers, make_event):
    """Registrations come back newest first with their events, filterable by status."""
    first = await make_event(title="First", starts_in=timedelta(hours=1))
    second = await make_event(title="Second", starts_in=timedelta(hours=2))
    await client.post("/api/v1/registrations/", json={"event_id": first.id}, headers=auth_headers)
    await client.post("/api/v1/registrations/interested", json={"event_id": second.id}, headers=auth_headers)

    response = await client.get("/api/v1/registrations/", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert [r["event_id"] for r in data] == [second.id, first.id]
    assert data[0]["event"]["title"] == "Second"

    going = await client.get("/api/v1/registrations/", params={"status": "going"}, headers=auth_headers)
    assert [r["event_id"] for r in going.json()] == [first.id]


@pytest.mark.asyncio
async def test_list_registrations_requires_auth(client: AsyncClient):
    response = await client.get("/api/v1/registrations/")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_register_insert_race_retries_as_update(db_session, test_user, test_event, monkeypatch):
    """
    Two concurrent registers can both miss the lookup. The losing INSERT hits
    uq_user_event, is rolled back and retried, and the retry updates the
    winner's row.
    """
    user_id, event_id = test_user.id, test_event.id
    db_session.add(UserEvent(user_id=user_id, event_id=event_id, status=STATUS_CANCELLED))
    await db_session.commit()

    real_find = registration_service._find_registration
    lookups = []

    async def stale_first_lookup(db, uid, eid):
        lookups.append(eid)
        if len(lookups) == 1:
            return None
        return await real_find(db, uid, eid)

    monkeypatch.setattr(registration_service, "_find_registration", stale_first_lookup)

    registration = await registration_service.register(db_session, user_id, event_id, {"major": "CS"})

    assert len(lookups) == 2
    assert registration.status == STATUS_GOING
    assert registration.custom_fields == {"major": "CS"}
    assert await _count_registrations(db_session, user_id, event_id) == 1


@pytest.mark.asyncio
async def test_unknown_status_rejected_by_database(db_session, test_user, test_event):
    db_session.add(UserEvent(user_id=test_user.id, event_id=test_event.id, status="maybe"))
    with pytest.raises(IntegrityError):
        await db_session.flush()
    await db_session.rollback()
