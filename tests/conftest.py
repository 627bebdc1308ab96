"""
Shared fixtures: an isolated upload store and a TestClient wired to it.
"""

from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from imageserver.core.upload_store import UploadStore, get_upload_store
from imageserver.main import app


def make_image(size=(300, 100), fmt="PNG", color=(200, 30, 30), mode="RGB") -> bytes:
    """Encode a solid-color image in memory."""
    img = Image.new(mode, size, color=color)
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def decode(data: bytes) -> Image.Image:
    img = Image.open(BytesIO(data))
    img.load()
    return img


@pytest.fixture
def store(tmp_path):
    return UploadStore(tmp_path / "uploads")


@pytest.fixture
def client(store):
    """TestClient whose upload store lives in a temp directory."""
    app.dependency_overrides[get_upload_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
