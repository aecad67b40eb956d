"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "sourcecheck",
    "environment": "dev",
    "http": {
        "timeout_seconds": 30.0,
        "user_agent": "sourcecheck/0.1.0",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "source_check": {
        "timeout_seconds": 15.0,
        "range_bytes": 2048,
        "max_probe_bytes": 8192,
        "signature_window": 64,
        "max_concurrent": 10,
        "max_batch_size": 50,
    },
}
