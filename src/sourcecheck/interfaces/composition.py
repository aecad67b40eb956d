"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from sourcecheck.application.use_cases import SourceCheckUseCase
from sourcecheck.infrastructure.config import AppConfig
from sourcecheck.infrastructure.persistence.log_outcome_recorder import (
    LogOutcomeRecorder,
)
from sourcecheck.infrastructure.validation import HttpVideoSourceValidator
from sourcecheck.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def build_http_client(config: AppConfig) -> httpx.AsyncClient:
    """Shared client for all probes; each probe passes its own timeout."""
    return httpx.AsyncClient(
        timeout=config.http_timeout_seconds,
        headers={"User-Agent": config.http_user_agent},
    )


def build_source_check_use_case(
    config: AppConfig, http_client: httpx.AsyncClient
) -> SourceCheckUseCase:
    sc = config.source_check
    validator = HttpVideoSourceValidator(
        http_client,
        timeout_seconds=sc.timeout_seconds,
        range_bytes=sc.range_bytes,
        max_probe_bytes=sc.max_probe_bytes,
        signature_window=sc.signature_window,
    )
    return SourceCheckUseCase(
        validator=validator,
        recorder=LogOutcomeRecorder(),
        max_concurrent=sc.max_concurrent,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    state = cast(AppState, app.state)
    config = state.config

    state.http_client = build_http_client(config)
    state.source_check_uc = build_source_check_use_case(config, state.http_client)
    log.info(
        "app_started",
        environment=config.environment,
        probe_timeout_seconds=config.source_check.timeout_seconds,
    )

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("app_stopped")
