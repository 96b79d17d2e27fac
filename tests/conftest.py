"""Shared fixtures for the test suite."""

import base64

import pytest

API_BASE = "https://api.openai.com/v1"
FAKE_API_KEY = "sk-test-api-key-for-testing"

# Smallest valid PNG (1x1 transparent pixel)
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA"
    "60e6kgAAAABJRU5ErkJggg=="
)
PNG_B64 = base64.b64encode(PNG_BYTES).decode()


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from OpenAI variables and .env files of the host."""
    for name in ("OPENAI_API_KEY", "OPENAI_BASE_URL", "IMAGEGEN_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def png_bytes():
    """Raw bytes of a tiny PNG image."""
    return PNG_BYTES


@pytest.fixture
def png_b64():
    """Base64 encoding of png_bytes, as returned by the Images API."""
    return PNG_B64
