"""Shared fixtures."""

import os

import pytest

from image2url.config.loader import create_test_config

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 100


@pytest.fixture(autouse=True)
def _clean_image2url_env(monkeypatch):
    """Keep developer IMAGE2URL_* variables out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("IMAGE2URL_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings():
    """Settings pointing at a fake upload endpoint."""
    return create_test_config(
        base_url="https://upload.test",
        max_bytes=2 * 1024 * 1024,
        timeout_ms=5000,
    )


@pytest.fixture
def png_bytes():
    return PNG_BYTES
