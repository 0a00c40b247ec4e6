from fastapi.testclient import TestClient

from shelfy.main import app

client = TestClient(app)


def test_health():
    r = client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_health_reports_app_name():
    from shelfy.core.config import settings

    r = client.get("/api/v1/health")
    assert r.json()["app"] == settings.APP_NAME
