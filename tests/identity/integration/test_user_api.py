"""Integration tests for the /users endpoints and bearer authentication."""

from datetime import timedelta

from identity.user.user import UserRole


class TestAuthentication:
    def test_missing_token(self, client):
        response = client.get("/users/me")

        assert response.status_code == 401
        assert response.json()["success"] is False
        assert response.json()["error"] == "unauthorized"

    def test_expired_token(self, client, make_user, make_token):
        user = make_user()
        token = make_token(user.external_id, expires_in=timedelta(seconds=-1))

        response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_valid_token_for_unknown_user(self, client, make_token):
        response = client.get("/users/me", headers={"Authorization": f"Bearer {make_token('ext_ghost')}"})

        assert response.status_code == 404
        assert response.json()["error"] == "user_not_found"


class TestProfile:
    def test_me(self, client, make_user, auth_headers):
        user = make_user(email="me@example.com")

        response = client.get("/users/me", headers=auth_headers(user))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["id"] == user.id
        assert body["data"]["email"] == "me@example.com"
        assert body["data"]["role"] == "customer"

    def test_role_flags(self, client, make_user, auth_headers):
        customer = make_user()
        admin = make_user(role=UserRole.ADMIN)

        assert client.get("/users/me/role", headers=auth_headers(customer)).json()["data"] == {
            "role": "customer",
            "can_sell": False,
            "is_admin": False,
        }
        assert client.get("/users/me/role", headers=auth_headers(admin)).json()["data"] == {
            "role": "admin",
            "can_sell": True,
            "is_admin": True,
        }


class TestBecomeVendorEndpoint:
    def test_upgrade_then_repeat(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())

        first = client.post("/users/me/become-vendor", headers=headers)
        second = client.post("/users/me/become-vendor", headers=headers)

        assert first.status_code == 200
        assert first.json()["data"]["role"] == "vendor"
        assert second.status_code == 409
        assert second.json()["error"] == "already_exists"


class TestHealth:
    def test_health_is_public(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["payment_gateway"] == "fake"

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"
