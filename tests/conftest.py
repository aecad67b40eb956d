"""Shared test fixtures for the sourcecheck test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Iterator

import httpx
import pytest
import respx

from sourcecheck.domain.entities import SourceCheckErrorCode, ValidationOutcome

# size header (0x18) + "ftyp" + "mp42" brand + minor version + compatible brands
MP4_PREFIX = bytes.fromhex(
    "00000018"
    "66747970"
    "6d703432"
    "00000000"
    "6d703432"
    "69736f6d"
)

# ---------------------------------------------------------------------------
# Payload fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mp4_bytes() -> bytes:
    """2 KiB payload that starts like a real MP4 file."""
    return MP4_PREFIX + b"\x00" * (2048 - len(MP4_PREFIX))


@pytest.fixture()
def html_bytes() -> bytes:
    return b"<!DOCTYPE html><html><head><title>Login</title></head></html>"


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
async def http_client() -> AsyncIterator[httpx.AsyncClient]:
    """Real httpx.AsyncClient for use with respx mocking."""
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture()
def respx_mock() -> Iterator[respx.MockRouter]:
    """Explicit respx mock router; unused routes are allowed."""
    with respx.mock(assert_all_called=False) as router:
        yield router


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_outcome() -> Callable[..., ValidationOutcome]:
    """Factory for outcomes with sensible defaults (invalid, HEAD_FAILED)."""

    def _make(**overrides: Any) -> ValidationOutcome:
        fields: dict[str, Any] = {
            "source_url": "https://cdn.example.com/ad.mp4",
            "final_url": "https://cdn.example.com/ad.mp4",
            "correlation_id": "abcd1234",
            "checked_at": datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
            "head_status": 404,
            "error_code": SourceCheckErrorCode.HEAD_FAILED,
            "error_message": "HEAD returned 404",
        }
        fields.update(overrides)
        return ValidationOutcome(**fields)

    return _make


@pytest.fixture()
def valid_outcome(make_outcome: Callable[..., ValidationOutcome]) -> ValidationOutcome:
    return make_outcome(
        valid=True,
        head_status=200,
        content_type="video/mp4",
        range_status=206,
        has_ftyp=True,
        ftyp_offset=4,
        error_code=None,
        error_message=None,
    )
