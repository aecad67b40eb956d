"""HTTP endpoints for validating video source URLs."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Header, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from sourcecheck.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/source-check", tags=["source-check"])

_HTTP_SCHEMES = ("http://", "https://")


def _is_http_url(url: str) -> bool:
    return url.lower().startswith(_HTTP_SCHEMES)


class BatchCheckRequest(BaseModel):
    urls: list[str] = Field(default_factory=list, description="Source URLs to check.")


def _bad_request(error: str, **details: object) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": error, **details})


@router.get("")
async def check_source(
    request: Request,
    url: str = Query(..., description="Video URL to validate."),
    correlation_id: str | None = Query(
        default=None, description="Tag for log correlation."
    ),
    x_correlation_id: str | None = Header(default=None),
) -> JSONResponse:
    """Validate a single source URL.

    The outcome is always returned with status 200; ``valid`` and
    ``error_code`` tell the caller whether the source is usable.
    """
    if not _is_http_url(url):
        return _bad_request("url_must_be_http", url=url)

    state = cast(AppState, request.app.state)
    outcome = await state.source_check_uc.execute(
        url, correlation_id or x_correlation_id
    )
    return JSONResponse(content=outcome.to_dict())


@router.post("/batch")
async def check_sources(request: Request, body: BatchCheckRequest) -> JSONResponse:
    """Validate several source URLs; each gets its own probe and correlation id."""
    state = cast(AppState, request.app.state)
    max_batch = state.config.source_check.max_batch_size

    if not body.urls:
        return _bad_request("urls_empty")
    if len(body.urls) > max_batch:
        return _bad_request("batch_too_large", max_batch_size=max_batch)
    rejected = [u for u in body.urls if not _is_http_url(u)]
    if rejected:
        return _bad_request("url_must_be_http", urls=rejected)

    outcomes = await state.source_check_uc.execute_batch(body.urls)
    return JSONResponse(
        content={
            "outcomes": [o.to_dict() for o in outcomes],
            "count": len(outcomes),
            "valid": sum(1 for o in outcomes if o.valid),
        }
    )
