"""Tests for registration, login, token refresh and admin user management."""

from hr_portal.core.jwt import create_refresh_token, decode_access_token, decode_refresh_token
from hr_portal.models.user import Role


def register(client, email="new.user@example.com", password="Secret123", name="New User"):
    return client.post("/auth/register", json={"email": email, "password": password, "name": name})


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestRegister:
    def test_register_returns_token_pair(self, client):
        response = register(client, email="New.User@Example.com")

        assert response.status_code == 201
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "new.user@example.com"
        assert body["user"]["role"] == "employee"
        claims = decode_access_token(body["access_token"])
        assert claims["sub"] == body["user"]["id"]
        assert claims["role"] == "employee"
        assert decode_refresh_token(body["refresh_token"])["sub"] == body["user"]["id"]

    def test_duplicate_email(self, client):
        register(client)

        response = register(client, email="NEW.USER@example.com")

        assert response.status_code == 409

    def test_password_with_whitespace(self, client):
        response = register(client, password="Secret 123")

        assert response.status_code == 400

    def test_short_password(self, client):
        assert register(client, password="short").status_code == 422


class TestLogin:
    def test_login(self, client, employee, password):
        response = client.post("/auth/login", json={"email": employee.email, "password": password})

        assert response.status_code == 200
        assert response.json()["user"]["id"] == str(employee.id)

    def test_wrong_password(self, client, employee):
        response = client.post("/auth/login", json={"email": employee.email, "password": "Wrong1234"})

        assert response.status_code == 401

    def test_unknown_email(self, client, password):
        response = client.post("/auth/login", json={"email": "ghost@example.com", "password": password})

        assert response.status_code == 401

    def test_deactivated_user(self, client, create_user, password):
        user = create_user("gone@example.com", Role.EMPLOYEE, is_active=False)

        response = client.post("/auth/login", json={"email": user.email, "password": password})

        assert response.status_code == 401

    def test_oauth2_form_token(self, client, admin, password):
        response = client.post("/auth/token", data={"username": admin.email, "password": password})

        assert response.status_code == 200
        assert decode_access_token(response.json()["access_token"])["role"] == "admin"


class TestTokens:
    def test_me(self, client, employee, employee_headers):
        response = client.get("/auth/me", headers=employee_headers)

        assert response.status_code == 200
        assert response.json()["email"] == employee.email

    def test_refresh_token_not_accepted_as_access(self, client, employee):
        token = create_refresh_token({"sub": str(employee.id), "role": employee.role})

        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_refresh_issues_new_pair(self, client):
        tokens = register(client).json()

        response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["id"] == tokens["user"]["id"]
        me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200

    def test_access_token_not_accepted_for_refresh(self, client):
        tokens = register(client).json()

        response = client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid refresh token"

    def test_refresh_for_deactivated_user(self, client, create_user):
        user = create_user("left@example.com", Role.EMPLOYEE, is_active=False)
        token = create_refresh_token({"sub": str(user.id), "role": user.role})

        response = client.post("/auth/refresh", json={"refresh_token": token})

        assert response.status_code == 401


class TestAdminUsers:
    def test_list_users(self, client, admin, employee, admin_headers):
        response = client.get("/admin/users", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert {u["email"] for u in body["users"]} == {admin.email, employee.email}

    def test_create_admin_user(self, client, admin_headers, password):
        response = client.post(
            "/admin/users",
            json={"email": "boss@example.com", "password": password, "name": "Boss", "role": "admin"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["role"] == "admin"
        login = client.post("/auth/login", json={"email": "boss@example.com", "password": password})
        assert login.status_code == 200

    def test_create_defaults_to_employee(self, client, admin_headers, password):
        response = client.post(
            "/admin/users",
            json={"email": "staff@example.com", "password": password, "name": "Staff"},
            headers=admin_headers,
        )

        assert response.json()["role"] == "employee"

    def test_create_duplicate(self, client, admin, admin_headers, password):
        response = client.post(
            "/admin/users",
            json={"email": admin.email, "password": password, "name": "Again"},
            headers=admin_headers,
        )

        assert response.status_code == 409

    def test_unknown_role_rejected(self, client, admin_headers, password):
        response = client.post(
            "/admin/users",
            json={"email": "x@example.com", "password": password, "name": "Xavier", "role": "root"},
            headers=admin_headers,
        )

        assert response.status_code == 422

    def test_employee_cannot_manage_users(self, client, employee_headers):
        assert client.get("/admin/users", headers=employee_headers).status_code == 403
