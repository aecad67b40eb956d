from .source_check import SourceCheckUseCase

__all__ = ["SourceCheckUseCase"]
