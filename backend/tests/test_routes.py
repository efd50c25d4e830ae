"""Tests for the HTTP routes."""
import httpx
import pytest
from fastapi import FastAPI

from hityourday.api import routes
from hityourday.pipeline import HighlightGenerationError


@pytest.fixture
def app():
    app = FastAPI()
    app.include_router(routes.router, prefix="/api")
    return app


@pytest.fixture
def client(app):
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


FORM = {
    "punch_count": "137",
    "duration_seconds": "180",
    "pace": "45.7",
    "top_speed_mph": "22.3",
    "current_streak": "5",
}


@pytest.mark.asyncio
async def test_health_reports_missing_ffmpeg(client, monkeypatch):
    monkeypatch.setattr(routes, "check_ffmpeg_available", lambda: False)
    monkeypatch.setattr(routes, "check_ffprobe_available", lambda: True)

    async with client:
        response = await client.get("/api/health")

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "degraded"
    assert "ffmpeg" in body["message"]


@pytest.mark.asyncio
async def test_create_highlight_success(client, monkeypatch, isolated_dirs):
    seen = {}

    async def _fake_generate(source_path, stats):
        seen["source"] = source_path
        seen["stats"] = stats
        assert source_path.exists()
        return "/uploads/final_1.mp4"

    monkeypatch.setattr(routes, "generate_highlight", _fake_generate)

    async with client:
        response = await client.post(
            "/api/highlights",
            data=FORM,
            files={"video": ("round 1.webm", b"recording", "video/webm")},
        )

    body = response.json()
    assert response.status_code == 200
    assert body["share_video_url"] == "/uploads/final_1.mp4"
    assert body["error"] is None
    assert body["stats"]["punch_count"] == 137
    assert seen["stats"].streak_days == 5
    # Upload is removed once the pipeline is done with it
    assert not seen["source"].exists()
    assert " " not in seen["source"].name


@pytest.mark.asyncio
async def test_create_highlight_failure_still_returns_stats(client, monkeypatch):
    seen = {}

    async def _failing_generate(source_path, stats):
        seen["source"] = source_path
        raise HighlightGenerationError("extract")

    monkeypatch.setattr(routes, "generate_highlight", _failing_generate)

    async with client:
        response = await client.post(
            "/api/highlights",
            data=FORM,
            files={"video": ("round.webm", b"recording", "video/webm")},
        )

    body = response.json()
    assert response.status_code == 200
    assert body["share_video_url"] is None
    assert body["error"] == "Highlight generation failed"
    assert body["stats"]["pace"] == 45.7
    assert not seen["source"].exists()


@pytest.mark.asyncio
async def test_create_highlight_without_video(client, monkeypatch):
    async def _unexpected(*args):
        raise AssertionError("pipeline should not run")

    monkeypatch.setattr(routes, "generate_highlight", _unexpected)

    async with client:
        response = await client.post(
            "/api/highlights",
            data={"punch_count": "90", "duration_seconds": "120"},
        )

    body = response.json()
    assert response.status_code == 200
    assert body["share_video_url"] is None
    # Pace derived from punches and round length
    assert body["stats"]["pace"] == 45.0


@pytest.mark.asyncio
async def test_create_highlight_rejects_missing_fields(client):
    async with client:
        response = await client.post("/api/highlights", data={"punch_count": "90"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_highlight_rejects_non_finite(client):
    async with client:
        response = await client.post(
            "/api/highlights",
            data={"punch_count": "nan", "duration_seconds": "120"},
        )

    # Rejected by form validation or by the finiteness check
    assert response.status_code in (400, 422)


@pytest.mark.asyncio
async def test_create_highlight_rejects_large_upload(client, monkeypatch, isolated_dirs):
    from hityourday.config import settings

    monkeypatch.setattr(settings, "max_upload_bytes", 4)

    async with client:
        response = await client.post(
            "/api/highlights",
            data=FORM,
            files={"video": ("round.webm", b"too large", "video/webm")},
        )

    assert response.status_code == 413
    assert list(settings.temp_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_create_highlight_storage_error_still_returns_stats(client, monkeypatch, tmp_path):
    from hityourday.config import settings

    # A file where the temp directory should be makes storing the upload fail
    blocked = tmp_path / "blocked"
    blocked.write_bytes(b"")
    monkeypatch.setattr(settings, "temp_dir", blocked)

    async def _unexpected(*args):
        raise AssertionError("pipeline should not run")

    monkeypatch.setattr(routes, "generate_highlight", _unexpected)

    async with client:
        response = await client.post(
            "/api/highlights",
            data=FORM,
            files={"video": ("round.webm", b"recording", "video/webm")},
        )

    body = response.json()
    assert response.status_code == 200
    assert body["share_video_url"] is None
    assert body["error"] == "Highlight generation failed"
    assert body["stats"]["punch_count"] == 137
