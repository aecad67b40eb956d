"""Outcome recorder that writes each outcome as one structured log line."""

from __future__ import annotations

import structlog

from sourcecheck.domain.entities import ValidationOutcome

log = structlog.get_logger(__name__)


class LogOutcomeRecorder:
    """Default OutcomeRecorderPort: operators trace outcomes in the log stream.

    Durable storage of outcomes lives outside this service; plug in a
    different recorder for that.
    """

    async def record(self, outcome: ValidationOutcome) -> None:
        log.info("source_check_outcome", **outcome.to_dict())
