"""Remote MP4 source validation: HEAD probe, ranged GET, signature sniff.

Before a video URL is handed to the screen-management provider we make
sure it really serves an MP4 file.  The most common failure is not a
dead link but an HTML login/error page served with status 200, so both
probes gate on ``text/html`` before any bytes are inspected.

Probe sequence (strictly ordered, no retries):
  1. HEAD (follow redirects): status and content-type gate.
  2. GET ``Range: bytes=0-2047`` on the original URL: status gate.
  3. Read at most 8 KiB of the body, then drop the connection.
  4. Look for the ``ftyp`` box marker in the first 64 bytes.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, TypeVar

import httpx
import structlog

from sourcecheck.domain.entities import SourceCheckErrorCode, ValidationOutcome
from sourcecheck.infrastructure.validation.bounded_reader import read_bounded
from sourcecheck.infrastructure.validation.mp4_signature import (
    DEFAULT_SIGNATURE_WINDOW,
    detect_mp4_signature,
)

log = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_RANGE_BYTES = 2048
DEFAULT_MAX_PROBE_BYTES = 8192

_RANGE_OK_STATUSES: frozenset[int] = frozenset({200, 206})
_HTML_MARKER = "text/html"
_LOG_URL_LIMIT = 120


def new_correlation_id() -> str:
    """Short random tag used to tie the log lines of one probe together."""
    return uuid.uuid4().hex[:8]


def _is_html(content_type: str | None) -> bool:
    return content_type is not None and _HTML_MARKER in content_type.lower()


def _looks_like_video(content_type: str) -> bool:
    lowered = content_type.lower()
    return lowered.startswith("video/") or "octet-stream" in lowered


def _parse_content_length(raw: str | None, plog: Any) -> int | None:
    """Informational header: anything but a non-negative integer is dropped."""
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        value = -1
    if value < 0:
        plog.warning("source_check_content_length_ignored", content_length=raw)
        return None
    return value


async def _with_deadline(step: Awaitable[T], timeout: float, phase: str) -> T:
    try:
        return await asyncio.wait_for(step, timeout=timeout)
    except asyncio.TimeoutError as e:
        raise TimeoutError(f"{phase} timed out after {timeout}s") from e


@dataclass
class _ProbeRecord:
    """Evidence gathered so far; frozen into a ValidationOutcome once."""

    source_url: str
    final_url: str
    correlation_id: str
    checked_at: datetime
    started: float
    head_status: int | None = None
    content_type: str | None = None
    content_length: int | None = None
    accept_ranges: str | None = None
    range_status: int | None = None
    range_content_range: str | None = None
    range_content_type: str | None = None
    has_ftyp: bool = False
    ftyp_offset: int | None = None

    def freeze(self, **verdict: Any) -> ValidationOutcome:
        duration_ms = int((time.perf_counter() - self.started) * 1000)
        return ValidationOutcome(
            source_url=self.source_url,
            final_url=self.final_url,
            correlation_id=self.correlation_id,
            checked_at=self.checked_at,
            head_status=self.head_status,
            content_type=self.content_type,
            content_length=self.content_length,
            accept_ranges=self.accept_ranges,
            range_status=self.range_status,
            range_content_range=self.range_content_range,
            range_content_type=self.range_content_type,
            has_ftyp=self.has_ftyp,
            ftyp_offset=self.ftyp_offset,
            duration_ms=max(0, duration_ms),
            **verdict,
        )


def _reject(
    record: _ProbeRecord,
    plog: Any,
    code: SourceCheckErrorCode,
    message: str,
) -> ValidationOutcome:
    outcome = record.freeze(error_code=code, error_message=message)
    plog.warning(
        "source_check_invalid",
        error_code=code.value,
        error_message=message,
        duration_ms=outcome.duration_ms,
    )
    return outcome


async def _run_probe(
    http_client: httpx.AsyncClient,
    record: _ProbeRecord,
    plog: Any,
    *,
    timeout_seconds: float,
    range_bytes: int,
    max_probe_bytes: int,
    signature_window: int,
) -> ValidationOutcome:
    url = record.source_url

    # --- Phase 1: HEAD ---
    plog.info("source_check_head_started", url=url[:_LOG_URL_LIMIT])
    head_resp = await _with_deadline(
        http_client.head(url, follow_redirects=True, timeout=timeout_seconds),
        timeout_seconds,
        "HEAD request",
    )
    record.head_status = head_resp.status_code
    record.content_type = head_resp.headers.get("content-type")
    record.accept_ranges = head_resp.headers.get("accept-ranges")
    record.final_url = str(head_resp.url) or url
    record.content_length = _parse_content_length(
        head_resp.headers.get("content-length"), plog
    )

    plog.info(
        "source_check_head_result",
        status=record.head_status,
        content_type=record.content_type,
        content_length=record.content_length,
        accept_ranges=record.accept_ranges,
        final_url=record.final_url[:_LOG_URL_LIMIT],
    )

    if record.head_status >= 400:
        return _reject(
            record,
            plog,
            SourceCheckErrorCode.HEAD_FAILED,
            f"HEAD returned {record.head_status}",
        )

    if _is_html(record.content_type):
        return _reject(
            record,
            plog,
            SourceCheckErrorCode.INVALID_SOURCE_HTML,
            "Source returns text/html instead of video",
        )

    # --- Phase 2: ranged GET (fresh request on the original URL) ---
    range_header = f"bytes=0-{range_bytes - 1}"
    plog.info("source_check_range_started", range=range_header)
    request = http_client.build_request(
        "GET",
        url,
        headers={"Range": range_header, "Accept-Encoding": "identity"},
        timeout=timeout_seconds,
    )
    range_resp = await _with_deadline(
        http_client.send(request, stream=True, follow_redirects=True),
        timeout_seconds,
        "Range GET",
    )
    try:
        record.range_status = range_resp.status_code
        record.range_content_range = range_resp.headers.get("content-range")
        record.range_content_type = range_resp.headers.get("content-type")

        if record.range_status not in _RANGE_OK_STATUSES:
            plog.info(
                "source_check_range_result",
                status=record.range_status,
                content_range=record.range_content_range,
                bytes=0,
            )
            return _reject(
                record,
                plog,
                SourceCheckErrorCode.RANGE_FAILED,
                f"Range GET returned {record.range_status}",
            )

        if _is_html(record.range_content_type):
            plog.info(
                "source_check_range_result",
                status=record.range_status,
                content_range=record.range_content_range,
                content_type=record.range_content_type,
                bytes=0,
            )
            return _reject(
                record,
                plog,
                SourceCheckErrorCode.INVALID_SOURCE_HTML,
                "Range GET returns text/html; source is serving a login page "
                "or HTML fallback",
            )

        # --- Phase 3: bounded read ---
        data = await _with_deadline(
            read_bounded(range_resp, max_probe_bytes),
            timeout_seconds,
            "Range body read",
        )
    finally:
        await range_resp.aclose()

    plog.info(
        "source_check_range_result",
        status=record.range_status,
        content_range=record.range_content_range,
        content_type=record.range_content_type,
        bytes=len(data),
        head32=data[:32].hex(),
    )

    # --- Phase 4: signature ---
    match = detect_mp4_signature(data, window=signature_window)
    record.has_ftyp = match.has_ftyp
    record.ftyp_offset = match.offset
    plog.info(
        "source_check_signature_result",
        has_ftyp=match.has_ftyp,
        offset=match.offset,
    )

    if not match.has_ftyp:
        return _reject(
            record,
            plog,
            SourceCheckErrorCode.INVALID_SOURCE_NOT_MP4,
            f"No ftyp signature found in first {min(signature_window, len(data))} "
            "bytes; file is not a valid MP4",
        )

    # Informational only once the ftyp marker is confirmed.
    effective_type = record.content_type or record.range_content_type or ""
    if effective_type and not _looks_like_video(effective_type):
        plog.warning(
            "source_check_content_type_mismatch",
            content_type=effective_type,
        )

    outcome = record.freeze(valid=True)
    plog.info(
        "source_check_valid",
        ftyp_offset=outcome.ftyp_offset,
        content_type=outcome.content_type,
        content_length=outcome.content_length,
        duration_ms=outcome.duration_ms,
    )
    return outcome


async def validate_video_source(
    http_client: httpx.AsyncClient,
    url: str,
    correlation_id: str | None = None,
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    range_bytes: int = DEFAULT_RANGE_BYTES,
    max_probe_bytes: int = DEFAULT_MAX_PROBE_BYTES,
    signature_window: int = DEFAULT_SIGNATURE_WINDOW,
) -> ValidationOutcome:
    """Probe *url* and report whether it serves an MP4 file.

    Never raises for probe failures: network errors, timeouts and
    unexpected exceptions end up as ``SOURCE_CHECK_ERROR`` on the outcome.
    Cancellation of the calling task still propagates.

    Args:
        http_client: Shared async client (injected, not closed here).
        url: Source URL to validate.
        correlation_id: Tag bound to every log line of this probe.
            A random 8-char token is generated when omitted.
        timeout_seconds: Deadline for each network step on its own.
        range_bytes: Size of the requested byte range.
        max_probe_bytes: Hard cap on bytes read from the range body.
        signature_window: Number of leading bytes searched for ``ftyp``.
    """
    corr_id = correlation_id or new_correlation_id()
    record = _ProbeRecord(
        source_url=url,
        final_url=url,
        correlation_id=corr_id,
        checked_at=datetime.now(timezone.utc),
        started=time.perf_counter(),
    )
    plog = log.bind(correlation_id=corr_id)

    try:
        return await _run_probe(
            http_client,
            record,
            plog,
            timeout_seconds=timeout_seconds,
            range_bytes=range_bytes,
            max_probe_bytes=max_probe_bytes,
            signature_window=signature_window,
        )
    except Exception as e:  # noqa: BLE001
        message = str(e) or type(e).__name__
        outcome = record.freeze(
            error_code=SourceCheckErrorCode.SOURCE_CHECK_ERROR,
            error_message=message,
        )
        plog.error(
            "source_check_error",
            url=url[:_LOG_URL_LIMIT],
            error=message,
            error_type=type(e).__name__,
            duration_ms=outcome.duration_ms,
        )
        return outcome


class HttpVideoSourceValidator:
    """SourceValidatorPort adapter over ``validate_video_source``.

    Holds only the injected client and immutable probe settings, so one
    instance can serve any number of concurrent validations.

    Args:
        http_client: Shared httpx.AsyncClient (injected).
        timeout_seconds: Per-step deadline (default: 15s).
        range_bytes: Requested range size (default: 2048).
        max_probe_bytes: Body read budget (default: 8192).
        signature_window: Leading bytes searched for ``ftyp`` (default: 64).
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        range_bytes: int = DEFAULT_RANGE_BYTES,
        max_probe_bytes: int = DEFAULT_MAX_PROBE_BYTES,
        signature_window: int = DEFAULT_SIGNATURE_WINDOW,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if range_bytes <= 0 or max_probe_bytes <= 0:
            raise ValueError("range_bytes and max_probe_bytes must be > 0")
        if signature_window < 4:
            raise ValueError("signature_window must be >= 4")
        self.http_client = http_client
        self.timeout_seconds = timeout_seconds
        self.range_bytes = range_bytes
        self.max_probe_bytes = max_probe_bytes
        self.signature_window = signature_window

    async def validate(
        self, url: str, correlation_id: str | None = None
    ) -> ValidationOutcome:
        return await validate_video_source(
            self.http_client,
            url,
            correlation_id,
            timeout_seconds=self.timeout_seconds,
            range_bytes=self.range_bytes,
            max_probe_bytes=self.max_probe_bytes,
            signature_window=self.signature_window,
        )
