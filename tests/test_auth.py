import logging
from datetime import datetime, timedelta, timezone

from services.user_management.models.users import User, Role
from helpers import PASSWORD, auth_headers


def registration(**overrides):
    payload = {
        "username": "y.benali",
        "first_name": "Youssef",
        "last_name": "Benali",
        "email": "y.benali@school.ma",
        "password": "Passw0rdX",
        "role": "TEACHER",
        "cin": "AB123456",
        "phone": "0612345678",
    }
    payload.update(overrides)
    return payload


class TestLogin:
    """Credential checks and issued tokens."""

    async def test_login_returns_tokens_and_permissions(self, client, teacher):
        response = await client.post("/api/auth/login", json={"username": teacher.username, "password": PASSWORD})
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["role"] == "TEACHER"
        assert data["full_name"] == teacher.full_name
        assert "schedule:read" in data["permissions"]
        assert "schedule:write" not in data["permissions"]

        check = await client.get("/api/auth/check", headers={"Authorization": f"Bearer {data['access_token']}"})
        assert check.json()["username"] == teacher.username

    async def test_login_records_last_login(self, client, session_factory, teacher):
        await client.post("/api/auth/login", json={"username": teacher.username, "password": PASSWORD})
        async with session_factory() as session:
            stored = await session.get(User, teacher.id)
        assert stored.last_login is not None
        assert stored.last_login_ip is not None

    async def test_wrong_password_is_401(self, client, teacher):
        response = await client.post("/api/auth/login", json={"username": teacher.username, "password": "Wrong123"})
        assert response.status_code == 401
        assert response.json()["error_code"] == "AUTHENTICATION_ERROR"

    async def test_unknown_user_is_401(self, client):
        response = await client.post("/api/auth/login", json={"username": "ghost", "password": PASSWORD})
        assert response.status_code == 401

    async def test_locked_account_is_401(self, client, make_user):
        locked = await make_user(Role.STUDENT, locked=True)
        response = await client.post("/api/auth/login", json={"username": locked.username, "password": PASSWORD})
        assert response.status_code == 401
        assert response.json()["message"] == "Account is locked"

    async def test_refresh(self, client, teacher):
        login = await client.post("/api/auth/login", json={"username": teacher.username, "password": PASSWORD})
        response = await client.post("/api/auth/refresh", json={"refresh_token": login.json()["refresh_token"]})
        assert response.status_code == 200
        assert response.json()["username"] == teacher.username

    async def test_access_token_cannot_refresh(self, client, teacher):
        login = await client.post("/api/auth/login", json={"username": teacher.username, "password": PASSWORD})
        response = await client.post("/api/auth/refresh", json={"refresh_token": login.json()["access_token"]})
        assert response.status_code == 401


class TestRegister:
    """Registration is an administrator operation."""

    async def test_admin_registers_teacher(self, client, admin_headers):
        response = await client.post("/api/auth/register", json=registration(), headers=admin_headers)
        assert response.status_code == 201
        assert response.json()["role"] == "TEACHER"

    async def test_teacher_cannot_register(self, client, teacher):
        response = await client.post("/api/auth/register", json=registration(), headers=auth_headers(teacher))
        assert response.status_code == 403

    async def test_duplicate_username(self, client, admin_headers):
        await client.post("/api/auth/register", json=registration(), headers=admin_headers)
        response = await client.post(
            "/api/auth/register",
            json=registration(email="other@school.ma", cin="CD654321"),
            headers=admin_headers,
        )
        assert response.status_code == 409
        assert "username" in response.json()["message"]

    async def test_duplicate_cin(self, client, admin_headers):
        await client.post("/api/auth/register", json=registration(), headers=admin_headers)
        response = await client.post(
            "/api/auth/register",
            json=registration(username="other", email="other@school.ma"),
            headers=admin_headers,
        )
        assert response.status_code == 409

    async def test_class_for_non_student_is_400(self, client, admin_headers):
        payload = registration(class_id="6f1c1c38-5d4a-4a8e-9d55-3f1ad8d4f3a1")
        response = await client.post("/api/auth/register", json=payload, headers=admin_headers)
        assert response.status_code == 400

    async def test_student_with_parent(self, client, admin_headers, make_user):
        parent = await make_user(Role.PARENT)
        payload = registration(role="STUDENT", parent_id=str(parent.id), cin=None)
        response = await client.post("/api/auth/register", json=payload, headers=admin_headers)
        assert response.status_code == 201
        assert response.json()["parent_id"] == str(parent.id)

    async def test_student_with_non_parent_guardian_is_404(self, client, admin_headers, teacher):
        payload = registration(role="STUDENT", parent_id=str(teacher.id), cin=None)
        response = await client.post("/api/auth/register", json=payload, headers=admin_headers)
        assert response.status_code == 404

    async def test_weak_password_is_422(self, client, admin_headers):
        response = await client.post("/api/auth/register", json=registration(password="password"), headers=admin_headers)
        assert response.status_code == 422

    async def test_bad_cin_and_phone_are_422(self, client, admin_headers):
        response = await client.post("/api/auth/register", json=registration(cin="123"), headers=admin_headers)
        assert response.status_code == 422
        response = await client.post("/api/auth/register", json=registration(phone="0812345678"), headers=admin_headers)
        assert response.status_code == 422


class TestPasswords:
    """Change and reset flows."""

    async def test_change_password_uses_token_identity(self, client, teacher):
        payload = {"current_password": PASSWORD, "new_password": "N3wSecret", "confirm_password": "N3wSecret"}
        response = await client.post("/api/auth/change-password", json=payload, headers=auth_headers(teacher))
        assert response.status_code == 200

        response = await client.post("/api/auth/login", json={"username": teacher.username, "password": "N3wSecret"})
        assert response.status_code == 200

    async def test_change_password_wrong_current(self, client, teacher):
        payload = {"current_password": "Nope1234", "new_password": "N3wSecret", "confirm_password": "N3wSecret"}
        response = await client.post("/api/auth/change-password", json=payload, headers=auth_headers(teacher))
        assert response.status_code == 400

    async def test_change_password_mismatch(self, client, teacher):
        payload = {"current_password": PASSWORD, "new_password": "N3wSecret", "confirm_password": "N3wSecreT"}
        response = await client.post("/api/auth/change-password", json=payload, headers=auth_headers(teacher))
        assert response.status_code == 400

    async def test_reset_flow(self, client, teacher, caplog):
        caplog.set_level(logging.INFO, logger="services.user_management.controllers.auth_service")
        response = await client.post("/api/auth/reset-password/request", json={"email": teacher.email})
        assert response.json()["success"] is True
        assert "token" not in response.text.lower()

        messages = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Password reset requested")]
        assert len(messages) == 1
        token = messages[0].rsplit(": ", 1)[1]

        payload = {"token": token, "new_password": "Reset1234"}
        response = await client.post("/api/auth/reset-password/confirm", json=payload)
        assert response.status_code == 200

        response = await client.post("/api/auth/login", json={"username": teacher.username, "password": "Reset1234"})
        assert response.status_code == 200

        response = await client.post("/api/auth/reset-password/confirm", json=payload)
        assert response.status_code == 400

    async def test_reset_request_for_unknown_email_still_succeeds(self, client):
        response = await client.post("/api/auth/reset-password/request", json={"email": "nobody@school.ma"})
        assert response.status_code == 200
        assert response.json()["success"] is True

    async def test_expired_reset_token(self, client, make_user):
        await make_user(
            Role.PARENT,
            reset_token="expired-token",
            reset_token_expiry=datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(hours=1),
        )
        payload = {"token": "expired-token", "new_password": "Reset1234"}
        response = await client.post("/api/auth/reset-password/confirm", json=payload)
        assert response.status_code == 400
        assert "expired" in response.json()["message"]
