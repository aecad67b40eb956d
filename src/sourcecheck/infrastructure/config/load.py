from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

# Flat keys (env vars, CLI flags) are "<prefix><key>" and land in a section.
_FLAT_PREFIXES: dict[str, str] = {
    "http_": "http",
    "log_": "logging",
    "source_check_": "source_check",
}
_SECTIONS = frozenset(_FLAT_PREFIXES.values())


def _sectioned(layer: Mapping[str, Any]) -> dict[str, Any]:
    """Bring one layer into the sectioned shape of DEFAULT_CONFIG."""
    out: dict[str, Any] = {}
    for key, value in layer.items():
        if key in _SECTIONS:
            if not isinstance(value, Mapping):
                raise ValueError(f"Config section {key!r} must be a mapping")
            out.setdefault(key, {}).update(value)
            continue
        for prefix, section in _FLAT_PREFIXES.items():
            if key.startswith(prefix):
                out.setdefault(section, {})[key[len(prefix) :]] = value
                break
        else:
            out[key] = value
    return out


def _merge(base: dict[str, Any], layer: Mapping[str, Any]) -> None:
    for key, value in _sectioned(layer).items():
        if key in _SECTIONS:
            base.setdefault(key, {}).update(value)
        else:
            base[key] = value


def _read_yaml_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(config_path)
    parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """
    Build the validated AppConfig: defaults < YAML < SOURCECHECK_* env < CLI.

    Each layer may use sections (``source_check: {range_bytes: ...}``) or
    flat keys (``source_check_range_bytes``).  A .env file feeds the env layer
    without overriding variables that are already set.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    config = deepcopy(DEFAULT_CONFIG)
    if config_path is not None:
        _merge(config, _read_yaml_config(config_path))
    _merge(config, EnvOverrides().to_update_dict())
    _merge(config, cli_overrides or {})

    return AppConfig.model_validate(config)
