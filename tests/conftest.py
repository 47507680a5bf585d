"""Shared pytest fixtures for the toolbench test suite."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Any, Callable

import pytest
import structlog
from PIL import Image

from toolbench.config.settings import Settings
from toolbench.providers.blob.local_blob_store import LocalBlobStore
from toolbench.utils.logging import configure_logging


@pytest.fixture(autouse=True)
def _fresh_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start each test at WARNING on stderr with logger caching off.

    A cached logger keeps the level and output stream it was first used
    with, so one test's captured stdout would leak into the next.
    """
    configure = structlog.configure

    def _configure_uncached(**kwargs: Any) -> None:
        kwargs["cache_logger_on_first_use"] = False
        configure(**kwargs)

    monkeypatch.setattr(structlog, "configure", _configure_uncached)
    configure_logging(log_level="WARNING", stream=sys.stderr)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def blob_store(tmp_path: Path) -> LocalBlobStore:
    """A filesystem blob store rooted in a per-test temp directory."""
    return LocalBlobStore(root_dir=tmp_path / "blobs")


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., Settings]:
    """Build ``Settings`` that ignore the developer's ``.env`` file."""

    def _make(**overrides: Any) -> Settings:
        overrides.setdefault("blob_local_dir", str(tmp_path / "blobs"))
        overrides.setdefault("feedback_db_path", str(tmp_path / "feedback.db"))
        return Settings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def png_bytes() -> bytes:
    """A small RGB PNG."""
    img = Image.new("RGB", (64, 48), color=(200, 40, 40))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
