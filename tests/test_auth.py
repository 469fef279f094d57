import pytest


@pytest.mark.anyio
async def test_login_with_form_data(async_client):
    """Test OAuth2 compatible login endpoint"""
    resp = await async_client.post(
        "/api/v1/auth/login",
        data={"username": "admin@test.com", "password": "adminpass"},
        headers={"Content-Type": "application/x-www-form-urlencoded"}
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert "access_token" in data
    assert "refresh_token" in data
    assert data["token_type"] == "bearer"


@pytest.mark.anyio
async def test_login_with_json(async_client):
    """Test JSON login endpoint"""
    resp = await async_client.post(
        "/api/v1/auth/login/json",
        json={"email": "driver@test.com", "password": "driverpass"}
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert "access_token" in data
    assert "refresh_token" in data


@pytest.mark.anyio
async def test_login_invalid_credentials(async_client):
    """Test login with wrong password"""
    resp = await async_client.post(
        "/api/v1/auth/login",
        data={"username": "admin@test.com", "password": "wrongpassword"},
        headers={"Content-Type": "application/x-www-form-urlencoded"}
    )
    assert resp.status_code == 401
    assert "Incorrect email or password" in resp.json()["detail"]


@pytest.mark.anyio
async def test_login_nonexistent_user(async_client):
    """Test login with non-existent email"""
    resp = await async_client.post(
        "/api/v1/auth/login",
        data={"username": "nobody@test.com", "password": "password"},
        headers={"Content-Type": "application/x-www-form-urlencoded"}
    )
    assert resp.status_code == 401


@pytest.mark.anyio
async def test_refresh_token(async_client):
    """Test token refresh endpoint"""
    resp = await async_client.post(
        "/api/v1/auth/login/json",
        json={"email": "client@test.com", "password": "clientpass"}
    )
    assert resp.status_code == 200
    tokens = resp.json()

    resp = await async_client.post(
        "/api/v1/auth/refresh",
        json={"refresh_token": tokens["refresh_token"]}
    )
    assert resp.status_code == 200, resp.text
    new_tokens = resp.json()
    assert "access_token" in new_tokens
    assert "refresh_token" in new_tokens


@pytest.mark.anyio
async def test_refresh_rejects_access_token(async_client):
    """An access token cannot be used as a refresh token"""
    resp = await async_client.post(
        "/api/v1/auth/login/json",
        json={"email": "client@test.com", "password": "clientpass"}
    )
    access = resp.json()["access_token"]

    resp = await async_client.post("/api/v1/auth/refresh", json={"refresh_token": access})
    assert resp.status_code == 401


@pytest.mark.anyio
async def test_refresh_token_invalid(async_client):
    """Test refresh with invalid token"""
    resp = await async_client.post(
        "/api/v1/auth/refresh",
        json={"refresh_token": "invalid.token.here"}
    )
    assert resp.status_code == 401


@pytest.mark.anyio
async def test_get_current_user(async_client, client_headers):
    """The profile carries the organisation link used for job scoping"""
    resp = await async_client.get("/api/v1/auth/me", headers=client_headers)
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["email"] == "client@test.com"
    assert data["role"] == "CLIENT"
    assert data["client_id"] == "client-1"
    assert data["reseller_id"] is None
    assert data["is_active"] is True


@pytest.mark.anyio
async def test_get_current_user_unauthorized(async_client):
    """Test getting current user without authentication"""
    resp = await async_client.get("/api/v1/auth/me")
    assert resp.status_code == 401


@pytest.mark.anyio
async def test_refresh_token_cannot_authenticate_requests(async_client):
    resp = await async_client.post(
        "/api/v1/auth/login/json",
        json={"email": "admin@test.com", "password": "adminpass"}
    )
    refresh = resp.json()["refresh_token"]

    resp = await async_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {refresh}"})
    assert resp.status_code == 401
    assert "Invalid token type" in resp.json()["detail"]
