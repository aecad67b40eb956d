"""Port for validating remote video sources before playback hand-off."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from sourcecheck.domain.entities import ValidationOutcome


@runtime_checkable
class SourceValidatorPort(Protocol):
    """Checks that a URL serves an MP4 file rather than HTML or garbage.

    Implementations probe with HEAD, then a ranged GET, and sniff the
    first bytes for the MP4 ``ftyp`` box. They never raise on probe
    failures; the failure is recorded on the returned outcome.
    """

    async def validate(
        self, url: str, correlation_id: str | None = None
    ) -> ValidationOutcome:
        """Validate a single source URL.

        Args:
            url: Remote video URL to probe.
            correlation_id: Optional tag for log correlation. Generated
                when omitted.

        Returns:
            The outcome of the probe (valid, or stopped with an error code).
        """
        ...
