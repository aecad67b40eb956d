from .outcome_recorder import OutcomeRecorderPort
from .source_validator import SourceValidatorPort

__all__ = [
    "OutcomeRecorderPort",
    "SourceValidatorPort",
]
