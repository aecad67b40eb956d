"""Tests for read_bounded (capped body read with early disconnect)."""

from __future__ import annotations

from typing import AsyncIterator

import httpx
import pytest

from sourcecheck.infrastructure.validation.bounded_reader import read_bounded


class _EndlessStream(httpx.AsyncByteStream):
    """Body that never ends; records whether it was closed."""

    def __init__(self, chunk: bytes = b"\x01" * 1000) -> None:
        self.chunk = chunk
        self.chunks_sent = 0
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while True:
            self.chunks_sent += 1
            yield self.chunk

    async def aclose(self) -> None:
        self.closed = True


class TestReadBounded:
    async def test_endless_stream_returns_exact_budget(self) -> None:
        stream = _EndlessStream()
        response = httpx.Response(200, stream=stream)

        data = await read_bounded(response, 8192)

        assert len(data) == 8192
        assert stream.closed is True
        assert response.is_closed is True
        # 9 chunks of 1000 bytes cover the budget; nothing beyond is pulled.
        assert stream.chunks_sent == 9

    async def test_short_body_returned_whole(self) -> None:
        response = httpx.Response(206, stream=httpx.ByteStream(b"abc"))
        data = await read_bounded(response, 8192)
        assert data == b"abc"
        assert response.is_closed is True

    async def test_empty_body(self) -> None:
        response = httpx.Response(200, stream=httpx.ByteStream(b""))
        assert await read_bounded(response, 8192) == b""

    async def test_budget_smaller_than_first_chunk(self) -> None:
        stream = _EndlessStream(chunk=b"x" * 4096)
        response = httpx.Response(200, stream=stream)

        data = await read_bounded(response, 10)

        assert data == b"x" * 10
        assert stream.chunks_sent == 1
        assert stream.closed is True

    async def test_preserves_byte_order(self) -> None:
        body = bytes(range(256)) * 4
        response = httpx.Response(200, stream=httpx.ByteStream(body))
        assert await read_bounded(response, 300) == body[:300]

    @pytest.mark.parametrize("budget", [0, -1])
    async def test_non_positive_budget_rejected(self, budget: int) -> None:
        response = httpx.Response(200, stream=httpx.ByteStream(b"abc"))
        with pytest.raises(ValueError):
            await read_bounded(response, budget)
