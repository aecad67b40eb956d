"""Integration tests for the composed source-check pipeline.

Wires the real composition (config -> HttpVideoSourceValidator ->
SourceCheckUseCase -> LogOutcomeRecorder) and only fakes the network.
"""

from __future__ import annotations

import asyncio
import json
from unittest.mock import patch

import httpx
import pytest
import respx
from structlog.testing import capture_logs

from sourcecheck.domain.entities import SourceCheckErrorCode
from sourcecheck.infrastructure.config import load_config
from sourcecheck.interfaces.cli.cli import start
from sourcecheck.interfaces.composition import build_source_check_use_case

pytestmark = pytest.mark.integration

GOOD = "https://cdn.example.com/good.mp4"
LOGIN = "https://cdn.example.com/login"
GONE = "https://cdn.example.com/gone.mp4"


def _mock_sources(router: respx.MockRouter, mp4_bytes: bytes, html: bytes) -> None:
    router.head(GOOD).respond(200, headers={"content-type": "video/mp4"})
    router.get(GOOD).respond(206, content=mp4_bytes)
    router.head(LOGIN).respond(200, headers={"content-type": "text/html"})
    router.get(LOGIN).respond(200, content=html)
    router.head(GONE).respond(404)


class TestComposedUseCase:
    async def test_single_check_is_recorded(
        self,
        http_client: httpx.AsyncClient,
        respx_mock: respx.MockRouter,
        mp4_bytes: bytes,
        html_bytes: bytes,
    ) -> None:
        _mock_sources(respx_mock, mp4_bytes, html_bytes)
        uc = build_source_check_use_case(load_config(), http_client)

        with capture_logs() as logs:
            outcome = await uc.execute(GOOD, "flow-1")

        assert outcome.valid is True
        recorded = [e for e in logs if e["event"] == "source_check_outcome"]
        assert len(recorded) == 1
        assert recorded[0]["correlation_id"] == "flow-1"
        assert recorded[0]["source_url"] == GOOD

    async def test_batch_mixes_verdicts(
        self,
        http_client: httpx.AsyncClient,
        respx_mock: respx.MockRouter,
        mp4_bytes: bytes,
        html_bytes: bytes,
    ) -> None:
        _mock_sources(respx_mock, mp4_bytes, html_bytes)
        uc = build_source_check_use_case(load_config(), http_client)

        outcomes = await uc.execute_batch([GOOD, LOGIN, GONE])

        assert [o.source_url for o in outcomes] == [GOOD, LOGIN, GONE]
        assert [o.error_code for o in outcomes] == [
            None,
            SourceCheckErrorCode.INVALID_SOURCE_HTML,
            SourceCheckErrorCode.HEAD_FAILED,
        ]
        assert len({o.correlation_id for o in outcomes}) == 3


class TestConcurrentIsolation:
    async def test_concurrent_checks_do_not_interfere(
        self, mp4_bytes: bytes, html_bytes: bytes
    ) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            # Interleave the two probes at every step.
            await asyncio.sleep(0.01)
            if request.url.path == "/login":
                return httpx.Response(
                    200, headers={"content-type": "text/html"}, content=html_bytes
                )
            return httpx.Response(
                206 if request.method == "GET" else 200,
                headers={"content-type": "video/mp4"},
                content=mp4_bytes if request.method == "GET" else b"",
            )

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            uc = build_source_check_use_case(load_config(), client)
            pairs = [(GOOD, "corr-good"), (LOGIN, "corr-login")] * 5

            outcomes = await asyncio.gather(*(uc.execute(u, c) for u, c in pairs))

        for (url, corr), outcome in zip(pairs, outcomes):
            assert outcome.source_url == url
            assert outcome.correlation_id == corr
            assert outcome.valid is (url == GOOD)


class TestCheckCommand:
    @pytest.fixture(autouse=True)
    def _quiet_logging(self):
        # Keep stdout for the printed JSON only.
        with patch("sourcecheck.interfaces.cli.cli.configure_logging"), capture_logs():
            yield

    def test_valid_source_exits_zero(
        self,
        respx_mock: respx.MockRouter,
        mp4_bytes: bytes,
        html_bytes: bytes,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _mock_sources(respx_mock, mp4_bytes, html_bytes)

        code = start(["check", GOOD, "--correlation-id", "cli-1"])

        assert code == 0
        printed = json.loads(capsys.readouterr().out)
        assert printed["valid"] is True
        assert printed["correlation_id"] == "cli-1"

    def test_any_invalid_source_exits_one(
        self,
        respx_mock: respx.MockRouter,
        mp4_bytes: bytes,
        html_bytes: bytes,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _mock_sources(respx_mock, mp4_bytes, html_bytes)

        code = start(["check", GOOD, GONE])

        assert code == 1
        printed = json.loads(capsys.readouterr().out)
        assert [o["valid"] for o in printed] == [True, False]

    def test_correlation_id_with_several_urls_rejected(
        self,
        respx_mock: respx.MockRouter,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            start(["check", GOOD, GONE, "--correlation-id", "cli-2"])

        assert exc_info.value.code == 2
        assert "single URL" in capsys.readouterr().err
        assert not respx_mock.calls
