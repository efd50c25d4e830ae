"""Shared test fixtures."""
import pytest

from hityourday.config import settings


@pytest.fixture(autouse=True)
def isolated_dirs(monkeypatch, tmp_path):
    """Point uploads and temp directories at a per-test location."""
    uploads = tmp_path / "uploads"
    temp = tmp_path / "temp"
    uploads.mkdir()
    temp.mkdir()
    monkeypatch.setattr(settings, "uploads_dir", uploads)
    monkeypatch.setattr(settings, "temp_dir", temp)
    return uploads
