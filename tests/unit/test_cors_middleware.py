from fastapi.testclient import TestClient

from tests.conftest import events

PREFLIGHT_HEADERS = {"Access-Control-Request-Method": "POST"}


def test_development_echoes_any_origin(make_app):
    client = TestClient(make_app(app_env="development"))
    r = client.get("/health/live", headers={"Origin": "https://anything.example"})
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "https://anything.example"
    assert r.headers["access-control-allow-credentials"] == "true"
    assert "Origin" in r.headers["vary"]


def test_request_without_origin_gets_no_cors_headers(make_app):
    client = TestClient(make_app(app_env="production"))
    r = client.get("/health/live")
    assert r.status_code == 200
    assert "access-control-allow-origin" not in r.headers


def test_production_whitelisted_origin_allowed(make_app):
    client = TestClient(make_app(app_env="production", cors_whitelist=("https://a.com",)))
    r = client.get("/health/live", headers={"Origin": "https://a.com"})
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "https://a.com"


def test_production_unlisted_origin_rejected(make_app, log_records):
    client = TestClient(make_app(app_env="production", cors_whitelist=("https://a.com",)))
    r = client.get("/health/live", headers={"Origin": "https://b.com"})
    assert r.status_code == 403
    assert r.json() == {"detail": "Not allowed by CORS"}
    assert "access-control-allow-origin" not in r.headers
    (rejected,) = events(log_records, "origin_rejected")
    assert rejected["extra"]["origin"] == "https://b.com"


def test_rejection_does_not_affect_later_requests(make_app):
    client = TestClient(make_app(app_env="production", cors_whitelist=("https://a.com",)))
    assert client.get("/health/live", headers={"Origin": "https://b.com"}).status_code == 403
    assert client.get("/health/live", headers={"Origin": "https://a.com"}).status_code == 200
    assert client.get("/health/live").status_code == 200


def test_production_missing_origin_rejected_when_flag_off(make_app):
    client = TestClient(make_app(app_env="production", cors_allow_missing_origin=False))
    assert client.get("/health/live").status_code == 403


def test_preflight_answers_204_with_fixed_contract(make_app):
    client = TestClient(make_app(app_env="development"))
    r = client.options("/health/live", headers={"Origin": "https://a.com", **PREFLIGHT_HEADERS})
    assert r.status_code == 204
    assert r.content == b""
    assert r.headers["access-control-allow-origin"] == "https://a.com"
    assert r.headers["access-control-allow-methods"] == "GET,POST,PUT,PATCH,DELETE"
    assert r.headers["access-control-allow-headers"] == "Content-Type,Authorization"
    assert r.headers["access-control-allow-credentials"] == "true"


def test_preflight_from_unlisted_origin_rejected(make_app):
    client = TestClient(make_app(app_env="production", cors_whitelist=("https://a.com",)))
    r = client.options("/health/live", headers={"Origin": "https://b.com", **PREFLIGHT_HEADERS})
    assert r.status_code == 403
