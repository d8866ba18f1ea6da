"""
Tests for authentication endpoints.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from campus_compass.core.security import create_access_token


@pytest.mark.asyncio
async def test_signup_success(client: AsyncClient, ucla):
    """Signing up with a university email returns a token and the new user."""
    response = await client.post(
        "/api/v1/auth/signup",
        json={"email": "New.Student@UCLA.edu", "password": "securepass123", "university_id": "ucla"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["access_token"]
    assert data["user"]["email"] == "new.student@ucla.edu"
    assert data["user"]["university_id"] == "ucla"
    assert data["user"]["interests"] == []


@pytest.mark.asyncio
async def test_signup_rejects_non_university_email(client: AsyncClient, ucla):
    response = await client.post(
        "/api/v1/auth/signup",
        json={"email": "someone@gmail.com", "password": "securepass123", "university_id": "ucla"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "invalid_input"


@pytest.mark.asyncio
async def test_signup_duplicate_email(client: AsyncClient, test_user):
    """Signing up twice with the same email returns 409."""
    response = await client.post(
        "/api/v1/auth/signup",
        json={"email": test_user.email, "password": "anotherpass123", "university_id": "ucla"},
    )
    assert response.status_code == 409
    assert response.json()["code"] == "conflict"


@pytest.mark.asyncio
async def test_signup_short_password(client: AsyncClient, ucla):
    """Passwords shorter than 8 characters fail validation."""
    response = await client.post(
        "/api/v1/auth/signup",
        json={"email": "short@ucla.edu", "password": "short", "university_id": "ucla"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_signup_unknown_university(client: AsyncClient, ucla):
    response = await client.post(
        "/api/v1/auth/signup",
        json={"email": "student@mit.edu", "password": "securepass123", "university_id": "mit"},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, test_user):
    """Valid credentials return a token that works on /me."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "test@ucla.edu", "password": "testpassword123"},
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["id"] == test_user.id


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, test_user):
    """Wrong password returns 401."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "test@ucla.edu", "password": "wrongpassword"},
    )
    assert response.status_code == 401
    assert response.json()["code"] == "unauthorized"


@pytest.mark.asyncio
async def test_login_unknown_email(client: AsyncClient, ucla):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@ucla.edu", "password": "whatever123"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_deactivated_account(client: AsyncClient, db_session, test_user):
    test_user.is_active = False
    await db_session.commit()

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "test@ucla.edu", "password": "testpassword123"},
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_me_requires_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me_rejects_garbage_token(client: AsyncClient, test_user):
    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_expired_token(client: AsyncClient, test_user):
    token = create_access_token({"sub": str(test_user.id)}, expires_delta=timedelta(minutes=-5))
    response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_token_of_deactivated_user(client: AsyncClient, db_session, test_user, auth_headers):
    test_user.is_active = False
    await db_session.commit()

    response = await client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_interests(client: AsyncClient, auth_headers):
    """Interests are replaced, trimmed and de-duplicated in order."""
    response = await client.put(
        "/api/v1/auth/me/interests",
        json={"interests": ["Career", " Social ", "Career", ""]},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["interests"] == ["Career", "Social"]

    me = await client.get("/api/v1/auth/me", headers=auth_headers)
    assert me.json()["interests"] == ["Career", "Social"]
