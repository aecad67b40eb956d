"""Use case: validate video source URLs before they are published."""

from __future__ import annotations

import asyncio

import structlog

from sourcecheck.domain.entities import ValidationOutcome
from sourcecheck.domain.ports import OutcomeRecorderPort, SourceValidatorPort

log = structlog.get_logger(__name__)


class SourceCheckUseCase:
    """Runs source validations and hands every outcome to the recorder.

    Each URL is an independent, single-shot probe; duplicates in a batch
    are probed again.  Whether a failed source is retried later is the
    caller's decision.
    """

    def __init__(
        self,
        *,
        validator: SourceValidatorPort,
        recorder: OutcomeRecorderPort | None = None,
        max_concurrent: int = 10,
    ) -> None:
        if max_concurrent <= 0:
            raise ValueError("max_concurrent must be > 0")
        self._validator = validator
        self._recorder = recorder
        self._max_concurrent = max_concurrent

    async def execute(
        self, url: str, correlation_id: str | None = None
    ) -> ValidationOutcome:
        outcome = await self._validator.validate(url, correlation_id)
        await self._record(outcome)
        return outcome

    async def execute_batch(self, urls: list[str]) -> list[ValidationOutcome]:
        """Validate many URLs concurrently, results in input order."""
        if not urls:
            return []

        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def _one(url: str) -> ValidationOutcome:
            async with semaphore:
                return await self.execute(url)

        log.info("source_check_batch_started", total=len(urls))
        outcomes = await asyncio.gather(*(_one(u) for u in urls))

        valid_count = sum(1 for o in outcomes if o.valid)
        log.info(
            "source_check_batch_completed",
            total=len(outcomes),
            valid=valid_count,
            invalid=len(outcomes) - valid_count,
        )
        return list(outcomes)

    async def _record(self, outcome: ValidationOutcome) -> None:
        if self._recorder is None:
            return
        try:
            await self._recorder.record(outcome)
        except Exception:  # noqa: BLE001
            log.warning(
                "source_check_record_failed",
                correlation_id=outcome.correlation_id,
                exc_info=True,
            )
