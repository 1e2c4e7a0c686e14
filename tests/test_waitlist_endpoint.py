from datetime import datetime

import pytest
import resend
from httpx import ASGITransport, AsyncClient
from redis import RedisError

from app.core.config import settings
from app.core.database import build_engine, get_db
from app.utils import rate_limiter
from main import app

URL = "/api/v1/waitlist"


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.mark.asyncio
async def test_signup_scenario(sent_notifications):
    async with _client() as ac:
        r = await ac.post(URL, json={"email": "a@x.com", "username": "alice_1"})
        assert r.status_code == 200
        body = r.json()
        assert body["success"] is True
        assert body["message"] == "Thank you for joining our waitlist!"
        assert body["data"]["twitterHandle"] == "alice_1"
        assert body["data"]["position"] == 1
        assert _parse(body["data"]["estimatedAccessDate"]) >= _parse(body["data"]["joinedAt"])

        r = await ac.post(URL, json={"email": "b@x.com", "username": "alice_1"})
        assert r.status_code == 409
        assert r.json() == {
            "success": False,
            "field": "username",
            "message": "This Twitter handle is already on our waitlist",
        }

        r = await ac.post(URL, json={"email": "a@x.com", "username": "bob_2"})
        assert r.status_code == 409
        assert r.json()["field"] == "email"

        r = await ac.post(URL, json={"email": "c@x.com", "username": "carol_3"})
        assert r.status_code == 200
        assert r.json()["data"]["position"] == 2

    assert sent_notifications == [("a@x.com", "alice_1", 1), ("c@x.com", "carol_3", 2)]


@pytest.mark.asyncio
async def test_referer_is_recorded_as_source(sent_notifications):
    async with _client() as ac:
        r = await ac.post(
            URL,
            json={"email": "a@x.com", "username": "@alice_1"},
            headers={"Referer": "https://example.com/landing"},
        )
        assert r.status_code == 200
        assert r.json()["data"]["twitterHandle"] == "alice_1"

        entries = (await ac.get("/api/v1/admin/waitlist", headers={"X-API-Key": settings.ADMIN_API_KEY})).json()
        assert entries["entries"][0]["source"] == "https://example.com/landing"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, field",
    [
        ({"email": "not-an-email", "username": "alice_1"}, "email"),
        ({"email": "a" * 316 + "@x.com", "username": "alice_1"}, "email"),
        ({"username": "alice_1"}, "email"),
        ({"email": "a@x.com", "username": "ab"}, "username"),
        ({"email": "a@x.com", "username": "a" * 16}, "username"),
        ({"email": "a@x.com"}, "username"),
    ],
)
async def test_validation_errors(payload, field, sent_notifications):
    async with _client() as ac:
        r = await ac.post(URL, json=payload)
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["field"] == field
    assert body["message"]
    assert sent_notifications == []


@pytest.mark.asyncio
async def test_malformed_body_is_a_client_error():
    async with _client() as ac:
        r = await ac.post(URL, content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["success"] is False


@pytest.mark.asyncio
async def test_wrong_method():
    async with _client() as ac:
        r = await ac.get(URL)
    assert r.status_code == 405
    assert r.json() == {"success": False, "message": "Method Not Allowed"}


@pytest.mark.asyncio
async def test_notifier_failure_does_not_affect_response(monkeypatch):
    monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test")

    def boom(params):
        raise RuntimeError("smtp down")

    monkeypatch.setattr(resend.Emails, "send", boom)
    async with _client() as ac:
        r = await ac.post(URL, json={"email": "a@x.com", "username": "alice_1"})
    assert r.status_code == 200
    assert r.json()["data"]["position"] == 1


@pytest.mark.asyncio
async def test_unexpected_error_returns_generic_payload(monkeypatch, sent_notifications):
    from app.services import waitlist_service

    def broken(position, joined_at):
        raise ValueError("bad batch size")

    monkeypatch.setattr(waitlist_service, "estimated_access_date", broken)
    # The server error middleware re-raises after responding
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.post(URL, json={"email": "a@x.com", "username": "alice_1"})
    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/json")
    body = r.json()
    assert body["success"] is False
    assert "bad batch size" not in body["message"]
    assert sent_notifications == []


@pytest.mark.asyncio
async def test_confirmation_email_is_sent(monkeypatch):
    monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test")
    sent = []
    monkeypatch.setattr(resend.Emails, "send", lambda params: sent.append(params) or {"id": "msg_1"})
    async with _client() as ac:
        r = await ac.post(URL, json={"email": "a@x.com", "username": "alice_1"})
    assert r.status_code == 200
    assert len(sent) == 1
    assert sent[0]["to"] == ["a@x.com"]
    assert "#1" in sent[0]["text"]


@pytest.mark.asyncio
async def test_store_unavailable_returns_generic_error(monkeypatch, tmp_path, sent_notifications):
    from sqlalchemy.orm import sessionmaker

    broken = build_engine(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'waitlist.db'}")
    Session = sessionmaker(bind=broken)

    def _broken_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _broken_db
    async with _client() as ac:
        r = await ac.post(URL, json={"email": "a@x.com", "username": "alice_1"})
    assert r.status_code == 503
    body = r.json()
    assert body["success"] is False
    assert "sqlite" not in body["message"].lower()
    assert sent_notifications == []


@pytest.mark.asyncio
async def test_rate_limit(monkeypatch, sent_notifications):
    monkeypatch.setattr(settings, "WAITLIST_SUBMIT_LIMIT_PER_MINUTE", 1)
    calls = []

    def fake_allow(key, limit, window_seconds):
        calls.append(key)
        return len(calls) <= limit

    monkeypatch.setattr(rate_limiter, "allow", fake_allow)
    async with _client() as ac:
        first = await ac.post(URL, json={"email": "a@x.com", "username": "alice_1"})
        second = await ac.post(URL, json={"email": "b@x.com", "username": "bob_2"})
    assert first.status_code == 200
    assert second.status_code == 429
    assert second.json()["success"] is False
    assert calls[0].startswith("waitlist:submit:")


@pytest.mark.asyncio
async def test_rate_limiter_fails_open(monkeypatch, sent_notifications):
    monkeypatch.setattr(settings, "WAITLIST_SUBMIT_LIMIT_PER_MINUTE", 1)

    def redis_down(key, limit, window_seconds):
        raise RedisError("connection refused")

    monkeypatch.setattr(rate_limiter, "allow", redis_down)
    async with _client() as ac:
        r = await ac.post(URL, json={"email": "a@x.com", "username": "alice_1"})
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_health():
    async with _client() as ac:
        r = await ac.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "healthy"}
