"""
Shared fixtures: every test gets its own image store in a temp directory,
an empty download gate and an open (secret-less) upload policy.
"""

import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from imagehost import app, auth, config, state
from imagehost.storage import ImageStore


def make_image_bytes(size=(64, 48), fmt="JPEG", color=(200, 30, 30), mode="RGB", **save_kwargs) -> bytes:
    """Encode a solid-colour test image in memory."""
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt, **save_kwargs)
    return buf.getvalue()


@pytest.fixture(autouse=True)
def store(tmp_path, monkeypatch):
    s = ImageStore(tmp_path / "imgs", tmp_path / "preview")
    s.ensure_dirs()
    monkeypatch.setattr(state, "_store", s)
    return s


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    monkeypatch.setattr(state.download_gate, "active", 0)
    monkeypatch.setattr(auth, "_upload_secret", None)
    monkeypatch.setattr(config, "ALLOWED_ORIGINS", [])
    monkeypatch.setattr(config, "BASE_URL", "")
    monkeypatch.setattr(config, "PREVIEW_FAILURE_IS_ERROR", False)


@pytest.fixture
def client():
    return TestClient(app)
