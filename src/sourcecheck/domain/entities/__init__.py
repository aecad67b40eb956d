from .source_check import SignatureMatch, SourceCheckErrorCode, ValidationOutcome

__all__ = [
    "SignatureMatch",
    "SourceCheckErrorCode",
    "ValidationOutcome",
]
