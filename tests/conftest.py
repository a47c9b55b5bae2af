"""Shared pytest fixtures for gpup tests."""

import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import Mock

import pytest

ENV_VARS = [
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "GPUP_OAUTH_METHOD",
    "GPUP_NEW_ALBUM",
    "GPUP_UPLOAD_WORKERS",
    "GPUP_LOG_LEVEL",
]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of settings."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_creds() -> Mock:
    """Credentials with a valid access token."""
    creds = Mock()
    creds.valid = True
    creds.token = "test_token"
    creds.refresh_token = "refresh_token_123"
    return creds


@pytest.fixture
def photo_tree(temp_dir: Path) -> Path:
    """
    Directory with 2 files at the top and 3 more in 2 subdirectories.

    root/
      a.jpg
      b.png
      sub1/c.jpg
      sub1/nested/d.mp4
      sub2/e.heic
    """
    root = temp_dir / "photos"
    (root / "sub1" / "nested").mkdir(parents=True)
    (root / "sub2").mkdir()
    for rel in ["a.jpg", "b.png", "sub1/c.jpg", "sub1/nested/d.mp4", "sub2/e.heic"]:
        (root / rel).write_bytes(b"fake_media_" + rel.encode())
    return root


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration between tests."""
    import logging

    # Store original handlers
    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level

    yield

    # Restore original state
    root_logger.handlers = original_handlers
    root_logger.level = original_level
