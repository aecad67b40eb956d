"""Read a capped prefix of a streamed HTTP body, then drop the connection."""

from __future__ import annotations

import httpx
import structlog

log = structlog.get_logger(__name__)


async def read_bounded(response: httpx.Response, max_bytes: int) -> bytes:
    """Collect at most *max_bytes* from a streamed response body.

    The response is closed as soon as the budget is reached, without
    waiting for the server to finish sending.  Video CDNs often keep
    the connection open for the whole file.  A body that ends early
    yields a shorter buffer, not an error.

    The response must have been sent with ``stream=True``.
    """
    if max_bytes <= 0:
        raise ValueError("max_bytes must be > 0")

    chunks: list[bytes] = []
    total = 0
    try:
        async for chunk in response.aiter_bytes():
            chunks.append(chunk)
            total += len(chunk)
            if total >= max_bytes:
                break
    finally:
        await response.aclose()

    data = b"".join(chunks)[:max_bytes]
    log.debug("bounded_read_finished", bytes=len(data), budget=max_bytes)
    return data
