"""
IQScaler - User API Tests
"""
from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from conftest import create_user
from iqscaler.core.database import utcnow
from iqscaler.core.security import create_access_token, hash_reset_token
from iqscaler.models import User


@pytest.fixture
def sample_user_data():
    """Sample user registration data."""
    return {
        "username": "carol",
        "email": "carol@example.com",
        "password": "TestPass123!",
    }


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test the health check endpoints."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

    response = await client.get("/api/health")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_register_user(client: AsyncClient, sample_user_data):
    """Registration returns the account with a token."""
    response = await client.post("/api/users", json=sample_user_data)
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == sample_user_data["email"]
    assert data["username"] == sample_user_data["username"]
    assert data["isAdmin"] is False
    assert data["token"]
    assert "id" in data
    assert "password" not in data


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, sample_user_data):
    """Duplicate registration fails with 400."""
    await client.post("/api/users", json=sample_user_data)

    response = await client.post("/api/users", json=sample_user_data)
    assert response.status_code == 400
    assert response.json()["message"] == "User already exists"


@pytest.mark.asyncio
async def test_register_rejects_short_password(client: AsyncClient, sample_user_data):
    sample_user_data["password"] = "123"
    response = await client.post("/api/users", json=sample_user_data)
    assert response.status_code == 400
    assert "password" in response.json()["message"]


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, sample_user_data):
    await client.post("/api/users", json=sample_user_data)

    response = await client.post("/api/users/login", json={
        "email": sample_user_data["email"],
        "password": sample_user_data["password"],
    })
    assert response.status_code == 200
    data = response.json()
    assert data["username"] == sample_user_data["username"]
    assert data["token"]


@pytest.mark.asyncio
async def test_login_invalid_credentials(client: AsyncClient, sample_user_data):
    await client.post("/api/users", json=sample_user_data)

    response = await client.post("/api/users/login", json={
        "email": sample_user_data["email"],
        "password": "WrongPassword123!",
    })
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_get_profile(client: AsyncClient, user):
    response = await client.get("/api/users/profile", headers=user["headers"])
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == user["email"]
    assert data["id"] == user["id"]


@pytest.mark.asyncio
async def test_profile_requires_token(client: AsyncClient):
    response = await client.get("/api/users/profile")
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized, no token"


@pytest.mark.asyncio
async def test_profile_rejects_bad_token(client: AsyncClient):
    response = await client.get(
        "/api/users/profile",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized, token failed"


@pytest.mark.asyncio
async def test_profile_rejects_expired_token(client: AsyncClient, user):
    token = create_access_token(user["id"], expires_delta=timedelta(seconds=-1))
    response = await client.get(
        "/api/users/profile",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401


# ============================================================================
# Password reset
# ============================================================================

@pytest.mark.asyncio
async def test_forgot_password_sends_reset_link(client: AsyncClient, user, fake_mailer, db_session):
    response = await client.post("/api/users/forgotpassword", json={"email": user["email"]})
    assert response.status_code == 200
    assert response.json()["success"] is True

    assert len(fake_mailer.sent) == 1
    mail = fake_mailer.sent[0]
    assert mail["to"] == user["email"]
    assert "http://client.test/resetpassword/" in mail["text"]

    token = mail["text"].split("/resetpassword/")[1].split()[0]
    stored = (await db_session.execute(
        select(User.reset_password_token).where(User.email == user["email"])
    )).scalar_one()
    assert stored == hash_reset_token(token)
    assert stored != token


@pytest.mark.asyncio
async def test_forgot_password_unknown_email(client: AsyncClient):
    response = await client.post("/api/users/forgotpassword", json={"email": "nobody@example.com"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_forgot_password_email_failure_clears_token(client: AsyncClient, user, fake_mailer, db_session):
    fake_mailer.fail = True

    response = await client.post("/api/users/forgotpassword", json={"email": user["email"]})
    assert response.status_code == 500
    assert response.json()["message"] == "Email could not be sent"

    row = (await db_session.execute(
        select(User.reset_password_token, User.reset_password_expire).where(User.email == user["email"])
    )).one()
    assert row.reset_password_token is None
    assert row.reset_password_expire is None


@pytest.mark.asyncio
async def test_reset_password_flow(client: AsyncClient, user, fake_mailer):
    await client.post("/api/users/forgotpassword", json={"email": user["email"]})
    token = fake_mailer.sent[0]["text"].split("/resetpassword/")[1].split()[0]

    response = await client.put(f"/api/users/resetpassword/{token}", json={"password": "brandnew99"})
    assert response.status_code == 200

    login = await client.post("/api/users/login", json={"email": user["email"], "password": "brandnew99"})
    assert login.status_code == 200

    # Tokens are single use
    again = await client.put(f"/api/users/resetpassword/{token}", json={"password": "another99"})
    assert again.status_code == 400
    assert again.json()["message"] == "Invalid or expired reset token."


@pytest.mark.asyncio
async def test_reset_password_expired_token(client: AsyncClient, user, db_session):
    token = "a" * 40
    db_user = (await db_session.execute(select(User).where(User.email == user["email"]))).scalar_one()
    db_user.reset_password_token = hash_reset_token(token)
    db_user.reset_password_expire = utcnow() - timedelta(minutes=1)
    await db_session.commit()

    response = await client.put(f"/api/users/resetpassword/{token}", json={"password": "brandnew99"})
    assert response.status_code == 400


# ============================================================================
# Admin user management
# ============================================================================

@pytest.mark.asyncio
async def test_list_users_requires_admin(client: AsyncClient, user):
    response = await client.get("/api/users", headers=user["headers"])
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized as an admin"


@pytest.mark.asyncio
async def test_admin_lists_and_updates_users(client: AsyncClient, admin, user):
    response = await client.get("/api/users", headers=admin["headers"])
    assert response.status_code == 200
    assert {u["email"] for u in response.json()} == {admin["email"], user["email"]}

    response = await client.put(
        f"/api/users/{user['id']}",
        json={"isAdmin": True, "username": "alice2"},
        headers=admin["headers"],
    )
    assert response.status_code == 200
    data = response.json()
    assert data["isAdmin"] is True
    assert data["username"] == "alice2"
    assert data["email"] == user["email"]


@pytest.mark.asyncio
async def test_admin_get_unknown_user(client: AsyncClient, admin):
    response = await client.get(
        "/api/users/00000000-0000-0000-0000-000000000000",
        headers=admin["headers"],
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_malformed_id_is_rejected(client: AsyncClient, admin):
    response = await client.get("/api/users/not-a-uuid", headers=admin["headers"])
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_admin_deletes_user(client: AsyncClient, admin, user):
    response = await client.delete(f"/api/users/{user['id']}", headers=admin["headers"])
    assert response.status_code == 200
    assert response.json()["message"] == "User removed"

    response = await client.get(f"/api/users/{user['id']}", headers=admin["headers"])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_admin_accounts_cannot_be_deleted(client: AsyncClient, admin, db_session):
    other_admin = await create_user(db_session, "root", "root@example.com", is_admin=True)

    response = await client.delete(f"/api/users/{other_admin['id']}", headers=admin["headers"])
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_route_message(client: AsyncClient):
    response = await client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json()["message"] == "Not Found - /api/nothing-here"
