"""
Global test configuration: environment isolation, fake Gemini clients, and
in-memory documents.
"""

import asyncio
from collections.abc import Callable
from contextlib import suppress
import json
import logging
import os
from types import SimpleNamespace
from typing import Any

import pytest

from earnings_digest.config import FrozenConfig


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-in escape hatch: mark a test with @pytest.mark.allow_dotenv
    to permit .env loading for that specific test.
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_gemini_env(request, monkeypatch):
    """Ensure a clean GEMINI_* environment for each test.

    - Removes all GEMINI_* variables and telemetry/debug toggles
    - Leaves non-GEMINI_* variables intact for stability

    Escape hatch: @pytest.mark.allow_env_pollution keeps the env unchanged.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith("GEMINI_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.delenv("EARNINGS_DIGEST_TELEMETRY", raising=False)


# --- Logging Fixtures ---
@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Sets the log level for noisy external libraries to WARNING."""
    for name in ("pdfminer", "httpx", "google_genai"):
        logging.getLogger(name).setLevel(logging.WARNING)


# --- Test Environment Markers ---


def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "integration: Component integration tests with a faked model client",
        "allow_dotenv: Permit .env loading for this test",
        "allow_env_pollution: Keep the ambient GEMINI_* environment",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


# --- Core Fixtures ---


@pytest.fixture
def mock_api_key():
    """Provide a consistent, fake API key for tests."""
    return "test_api_key_12345_67890_abcdef_ghijkl"


@pytest.fixture
def digest_config(mock_api_key) -> FrozenConfig:
    """A configuration with a key and short timeout."""
    return FrozenConfig(api_key=mock_api_key, request_timeout_seconds=5.0)


@pytest.fixture
def keyless_config() -> FrozenConfig:
    """A configuration without an API key."""
    return FrozenConfig(api_key=None)


# --- Fake Gemini SDK ---


class FakeModels:
    """Stands in for `client.aio.models` and records each call.

    Tests steer behavior by setting `text`, `error`, or `delay`.
    """

    def __init__(self) -> None:
        self.text: str | None = json.dumps({"tone": "optimistic"})
        self.error: Exception | None = None
        self.delay: float = 0.0
        self.calls: list[dict[str, Any]] = []

    async def generate_content(self, *, model: str, contents: Any, config: Any) -> Any:
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


class FakeClientFactory:
    """Builds fake SDK clients sharing one `FakeModels`; records API keys and closes."""

    def __init__(self, models: FakeModels) -> None:
        self.models = models
        self.api_keys: list[str] = []
        self.closed = 0

    def __call__(self, api_key: str) -> Any:
        self.api_keys.append(api_key)
        return SimpleNamespace(
            aio=SimpleNamespace(models=self.models, aclose=self._aclose)
        )

    async def _aclose(self) -> None:
        self.closed += 1


@pytest.fixture
def fake_models() -> FakeModels:
    """The fake `aio.models` surface; inspect `.calls` after the test acts."""
    return FakeModels()


@pytest.fixture
def client_factory(fake_models) -> FakeClientFactory:
    """A client factory returning fakes bound to `fake_models`."""
    return FakeClientFactory(fake_models)


# --- In-memory documents ---


def _pdf_literal(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(lines: list[str] | None = None) -> bytes:
    """Build a one-page PDF whose text layer holds `lines` (none for a blank page)."""
    body = ""
    if lines:
        ops = ["BT", "/F1 10 Tf", "12 TL", "40 750 Td"]
        ops.extend(f"({_pdf_literal(line)}) Tj T*" for line in lines)
        ops.append("ET")
        body = "\n".join(ops)
    stream = body.encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets: list[int] = []
    for number, obj in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + obj + b"\nendobj\n"

    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref_at
    return bytes(out)


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """Factory for in-memory PDFs with an optional text layer."""
    return build_pdf


@pytest.fixture
def long_transcript_lines() -> list[str]:
    """Enough text-layer lines to clear the scanned-source threshold."""
    return [
        f"Line {i:02d} revenue grew across all segments and margins expanded"
        for i in range(15)
    ]
