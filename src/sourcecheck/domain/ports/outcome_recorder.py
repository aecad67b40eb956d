"""Port for the collaborator that records validation outcomes."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from sourcecheck.domain.entities import ValidationOutcome


@runtime_checkable
class OutcomeRecorderPort(Protocol):
    """Receives every finished outcome (log sink, database, audit trail)."""

    async def record(self, outcome: ValidationOutcome) -> None: ...
