"""Shared test fixtures and configuration for backend tests."""
import io
from typing import Callable, Tuple

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from filedepot.config import AppConfig
from filedepot.files import FileDepot, build_depot, get_depot, set_depot
from filedepot.main import app

_COLORS = {"RGB": (200, 30, 30), "RGBA": (200, 30, 30, 128), "L": 128, "P": 1}


@pytest.fixture
def config(tmp_path) -> AppConfig:
    """Configuration pointing every path into a temp directory."""
    cfg = AppConfig()
    cfg.storage.uploads_dir = str(tmp_path / "uploads")
    cfg.storage.thumbnails_dir = str(tmp_path / "thumbnails")
    cfg.catalog.db_path = str(tmp_path / "catalog.duckdb")
    return cfg


@pytest.fixture
def depot(config):
    """A fully wired FileDepot backed by temp storage."""
    depot = build_depot(config)
    yield depot
    depot.close()


@pytest.fixture
def api_client(depot: FileDepot):
    """Provide a TestClient for the main FastAPI app with a temp depot installed.

    The lifespan is not entered, so the installed depot is used as-is.
    """
    original = get_depot()
    set_depot(depot)
    yield TestClient(app)
    set_depot(original)


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Factory for encoded test images."""

    def _make(fmt: str = "PNG", size: Tuple[int, int] = (640, 480), mode: str = "RGB") -> bytes:
        img = Image.new(mode, size, color=_COLORS[mode])
        buffer = io.BytesIO()
        img.save(buffer, fmt)
        return buffer.getvalue()

    return _make
