"""Tests for LogOutcomeRecorder."""

from __future__ import annotations

from structlog.testing import capture_logs

from sourcecheck.domain.entities import ValidationOutcome
from sourcecheck.domain.ports import OutcomeRecorderPort
from sourcecheck.infrastructure.persistence.log_outcome_recorder import (
    LogOutcomeRecorder,
)


class TestLogOutcomeRecorder:
    def test_satisfies_port(self) -> None:
        assert isinstance(LogOutcomeRecorder(), OutcomeRecorderPort)

    async def test_emits_one_line_with_outcome_fields(
        self, valid_outcome: ValidationOutcome
    ) -> None:
        with capture_logs() as logs:
            await LogOutcomeRecorder().record(valid_outcome)

        assert len(logs) == 1
        entry = logs[0]
        assert entry["event"] == "source_check_outcome"
        assert entry["correlation_id"] == valid_outcome.correlation_id
        assert entry["valid"] is True
        assert entry["ftyp_offset"] == 4
