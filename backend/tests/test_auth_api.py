"""
Auth API Tests

Registration, login, session lookup and logout through the HTTP surface,
plus the standard error envelope.
"""

from datetime import timedelta

from api.utils.auth import create_access_token


class TestRegisterAndLogin:
    def test_register_returns_token(self, test_client):
        response = test_client.post("/auth/register", json={"email": "new@example.com", "password": "s3cret-pass"})

        assert response.status_code == 201
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["access_token"]

    def test_duplicate_email_rejected(self, test_client):
        payload = {"email": "dup@example.com", "password": "s3cret-pass"}
        test_client.post("/auth/register", json=payload)

        response = test_client.post("/auth/register", json={"email": "DUP@example.com", "password": "another-pass"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "ALREADY_EXISTS"

    def test_short_password_is_validation_error(self, test_client):
        response = test_client.post("/auth/register", json={"email": "short@example.com", "password": "abc"})

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["status_code"] == 422

    def test_login_round_trip(self, test_client):
        test_client.post("/auth/register", json={"email": "login@example.com", "password": "s3cret-pass"})

        response = test_client.post("/auth/login", json={"email": "login@example.com", "password": "s3cret-pass"})

        assert response.status_code == 200
        token = response.json()["access_token"]
        session = test_client.get("/auth/session", headers={"Authorization": f"Bearer {token}"})
        assert session.status_code == 200
        assert session.json()["user"]["email"] == "login@example.com"

    def test_wrong_password(self, test_client):
        test_client.post("/auth/register", json={"email": "wrong@example.com", "password": "s3cret-pass"})

        response = test_client.post("/auth/login", json={"email": "wrong@example.com", "password": "not-it-at-all"})

        assert response.status_code == 401
        body = response.json()
        assert body["error_code"] == "UNAUTHORIZED"
        assert body["message"] == "Incorrect email or password"

    def test_unknown_user(self, test_client):
        response = test_client.post("/auth/login", json={"email": "ghost@example.com", "password": "whatever1"})

        assert response.status_code == 401


class TestSession:
    def test_session_reports_user_and_expiry(self, test_client, trader):
        response = test_client.get("/auth/session", headers=trader["headers"])

        assert response.status_code == 200
        body = response.json()
        assert body["user"] == {"id": trader["user_id"], "email": trader["email"]}
        assert body["expires_at"] is not None

    def test_missing_token(self, test_client):
        response = test_client.get("/auth/session")

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_garbage_token(self, test_client):
        response = test_client.get("/auth/session", headers={"Authorization": "Bearer not.a.token"})

        assert response.status_code == 401

    def test_expired_token(self, test_client, trader):
        token = create_access_token(
            data={"sub": trader["email"], "user_id": trader["user_id"]},
            expires_delta=timedelta(minutes=-5),
        )

        response = test_client.get("/auth/session", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_logout_requires_token(self, test_client, trader):
        assert test_client.post("/auth/logout").status_code == 401
        assert test_client.post("/auth/logout", headers=trader["headers"]).status_code == 200


class TestServiceEndpoints:
    def test_root(self, test_client):
        body = test_client.get("/").json()

        assert body["name"] == "Trade Journal API"

    def test_healthz(self, test_client):
        response = test_client.get("/healthz")

        assert response.status_code == 200
        body = response.json()
        assert body["database"]["healthy"] is True
        assert set(body["credentials"]) == {"backend_url", "backend_anon_key", "backend_service_role_key"}
