from __future__ import annotations

from .load import load_config
from .schema import AppConfig, EnvOverrides, SourceCheckConfig

__all__ = ["AppConfig", "EnvOverrides", "SourceCheckConfig", "load_config"]
