class TestHealthPublic:
    def test_health_no_auth(self, client):
        r = client.get("/api/v1/health")
        assert r.status_code == 200
        assert r.json()["ok"] is True


class TestRegister:
    def test_register_creates_user(self, client):
        body = {"email": "Carol@X.com", "password": "longenough", "name": "Carol"}
        r = client.post("/api/v1/auth/register", json=body)
        assert r.status_code == 201
        data = r.json()
        assert data["email"] == "carol@x.com"
        assert data["name"] == "Carol"
        assert data["image"] is None

    def test_register_then_login(self, client):
        client.post(
            "/api/v1/auth/register",
            json={"email": "carol@x.com", "password": "longenough"},
        )
        r = client.post(
            "/api/v1/auth/login",
            json={"email": "carol@x.com", "password": "longenough"},
        )
        assert r.status_code == 200
        assert "access_token" in r.json()

    def test_register_duplicate_email(self, client, seed_user):
        body = {"email": "alice@x.com", "password": "longenough"}
        r = client.post("/api/v1/auth/register", json=body)
        assert r.status_code == 400

    def test_register_short_password(self, client):
        r = client.post(
            "/api/v1/auth/register",
            json={"email": "carol@x.com", "password": "short"},
        )
        assert r.status_code == 422


class TestLogin:
    def test_login_valid(self, client, seed_user):
        creds = {"email": "alice@x.com", "password": "password123"}
        r = client.post("/api/v1/auth/login", json=creds)
        assert r.status_code == 200
        body = r.json()
        assert "access_token" in body
        assert body["token_type"] == "bearer"

    def test_login_wrong_password(self, client, seed_user):
        creds = {"email": "alice@x.com", "password": "wrong"}
        r = client.post("/api/v1/auth/login", json=creds)
        assert r.status_code == 401

    def test_login_unknown_email(self, client, seed_user):
        creds = {"email": "nobody@x.com", "password": "x"}
        r = client.post("/api/v1/auth/login", json=creds)
        assert r.status_code == 401

    def test_login_inactive_user(self, db, client, seed_user):
        user, _ = seed_user
        user.is_active = False
        db.commit()

        creds = {"email": "alice@x.com", "password": "password123"}
        r = client.post("/api/v1/auth/login", json=creds)
        assert r.status_code == 401


class TestDevToken:
    def test_dev_token_ok(self, client, seed_user):
        r = client.post("/api/v1/auth/dev-token", json={"email": "alice@x.com"})
        assert r.status_code == 200
        assert "access_token" in r.json()

    def test_dev_token_unknown_user(self, client, seed_user):
        r = client.post("/api/v1/auth/dev-token", json={"email": "ghost@x.com"})
        assert r.status_code == 404

    def test_dev_token_disabled_outside_local(self, client, seed_user, monkeypatch):
        from shelfy.core.config import settings

        monkeypatch.setattr(settings, "APP_ENV", "production")
        r = client.post("/api/v1/auth/dev-token", json={"email": "alice@x.com"})
        assert r.status_code == 404


class TestMe:
    def test_me_returns_profile(self, client, auth_header, seed_user):
        user, _ = seed_user
        r = client.get("/api/v1/auth/me", headers=auth_header)
        assert r.status_code == 200
        assert r.json() == {
            "id": str(user.id),
            "email": "alice@x.com",
            "name": "Alice",
            "image": None,
        }


class TestProtectedEndpoints:
    def test_groups_requires_auth(self, client):
        r = client.get("/api/v1/groups")
        assert r.status_code == 401

    def test_groups_with_valid_token(self, client, auth_header, seed_user):
        r = client.get("/api/v1/groups", headers=auth_header)
        assert r.status_code == 200
        assert isinstance(r.json(), list)

    def test_groups_with_garbage_token(self, client):
        r = client.get("/api/v1/groups", headers={"Authorization": "Bearer garbage"})
        assert r.status_code == 401

    def test_groups_with_expired_token(self, client, seed_user):
        from datetime import UTC, datetime, timedelta

        from jose import jwt

        from shelfy.core.config import settings

        user, _ = seed_user
        exp = datetime.now(UTC) - timedelta(hours=1)
        payload = {"sub": str(user.id), "exp": int(exp.timestamp()), "iat": int(exp.timestamp())}
        token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)
        r = client.get("/api/v1/groups", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401

    def test_token_for_unknown_user(self, client):
        import uuid

        from shelfy.core.security import create_access_token

        token = create_access_token(subject=str(uuid.uuid4()))
        r = client.get("/api/v1/groups", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401


class TestTokenFromLogin:
    """End-to-end: login then use token to call a protected endpoint."""

    def test_login_then_list_groups(self, client, seed_user):
        login_r = client.post(
            "/api/v1/auth/login",
            json={"email": "alice@x.com", "password": "password123"},
        )
        token = login_r.json()["access_token"]

        r = client.get("/api/v1/groups", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 200
        assert [g["name"] for g in r.json()] == ["BookClub"]
