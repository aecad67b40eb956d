"""Domain entities for remote video source validation.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class SourceCheckErrorCode(str, Enum):
    """Failure points of a probe, in the order a probe can reach them."""

    HEAD_FAILED = "HEAD_FAILED"
    INVALID_SOURCE_HTML = "INVALID_SOURCE_HTML"
    RANGE_FAILED = "RANGE_FAILED"
    INVALID_SOURCE_NOT_MP4 = "INVALID_SOURCE_NOT_MP4"
    SOURCE_CHECK_ERROR = "SOURCE_CHECK_ERROR"


@dataclass(frozen=True)
class SignatureMatch:
    """Result of scanning a byte buffer for the MP4 ``ftyp`` marker."""

    has_ftyp: bool
    offset: int | None = None

    def __post_init__(self) -> None:
        if self.has_ftyp and self.offset is None:
            raise ValueError("offset is required when has_ftyp is set")
        if not self.has_ftyp and self.offset is not None:
            raise ValueError("offset must be None without an ftyp match")


@dataclass(frozen=True)
class ValidationOutcome:
    """Structured result of one source validation.

    Either ``valid`` is True or ``error_code`` names the point where the
    probe stopped, never both and never neither.
    """

    source_url: str
    final_url: str
    correlation_id: str
    checked_at: datetime
    valid: bool = False
    head_status: int | None = None
    content_type: str | None = None  # HEAD content-type
    content_length: int | None = None
    accept_ranges: str | None = None
    range_status: int | None = None
    range_content_range: str | None = None
    range_content_type: str | None = None
    has_ftyp: bool = False
    ftyp_offset: int | None = None
    error_code: SourceCheckErrorCode | None = None
    error_message: str | None = None
    duration_ms: int = 0

    def __post_init__(self) -> None:
        if self.valid == (self.error_code is not None):
            raise ValueError("exactly one of valid / error_code must be set")
        if (self.error_code is None) != (self.error_message is None):
            raise ValueError("error_message must be present iff error_code is set")
        if self.ftyp_offset is not None and not self.has_ftyp:
            raise ValueError("ftyp_offset requires has_ftyp")
        if self.valid and not self.has_ftyp:
            raise ValueError("a valid outcome requires an ftyp match")
        if self.content_length is not None and self.content_length < 0:
            raise ValueError("content_length must be >= 0")
        if self.duration_ms < 0:
            raise ValueError("duration_ms must be >= 0")

    @property
    def effective_content_type(self) -> str | None:
        """HEAD content-type, falling back to the range response's."""
        return self.content_type or self.range_content_type

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["checked_at"] = self.checked_at.isoformat()
        data["error_code"] = self.error_code.value if self.error_code else None
        return data
