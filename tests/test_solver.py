"""Tests for GeometrySolver streaming, lifecycle, and failure handling."""

from __future__ import annotations

import asyncio

import pytest

from geo_tutor.exceptions import (
    ConfigError,
    ExtractionNotFoundError,
    ProviderAuthError,
    ProviderError,
    ProviderRateLimitError,
    ProviderTimeoutError,
    SolverBusyError,
)
from geo_tutor.reasoning.providers.base import StreamProvider
from geo_tutor.reasoning.solver import (
    LLM_CALL_TIMEOUT,
    GeometrySolver,
    SolveRequest,
    SolveStatus,
    accumulate,
)

RESPONSE = (
    "<thinking>Base area 16, height 6.</thinking>\n"
    '<json>{"problemSummary": "pyramid volume", "steps": [{"stepId": 1, '
    '"title": "Volume", "description": "V = Bh/3", "visuals": {"points": [], '
    '"lines": []}}], "finalAnswer": "32"}</json>'
)


def _chunks(text: str, size: int = 17) -> list[str]:
    return [text[i : i + size] for i in range(0, len(text), size)]


class ScriptedProvider(StreamProvider):
    """Replays fixed chunks, optionally failing or blocking along the way."""

    def __init__(
        self,
        chunks: list[str],
        error: BaseException | None = None,
        gate: asyncio.Event | None = None,
        delay: float = 0.0,
    ):
        self._chunks = chunks
        self._error = error
        self._gate = gate
        self._delay = delay
        self.calls: list[tuple] = []

    async def stream_text(self, prompt, image=None, image_mime_type=None):
        self.calls.append((prompt, image, image_mime_type))
        for chunk in self._chunks:
            if self._gate is not None:
                await self._gate.wait()
            if self._delay:
                await asyncio.sleep(self._delay)
            yield chunk
        if self._error is not None:
            raise self._error

    @property
    def provider_name(self) -> str:
        return "scripted"

    @property
    def model_name(self) -> str:
        return "scripted-v1"


async def _agen(items):
    for item in items:
        yield item


class TestAccumulate:
    @pytest.mark.asyncio
    async def test_yields_growing_snapshots_in_order(self):
        snapshots = [s async for s in accumulate(_agen(["ab", "c", "def"]))]
        assert snapshots == ["ab", "abc", "abcdef"]

    @pytest.mark.asyncio
    async def test_skips_empty_chunks(self):
        snapshots = [s async for s in accumulate(_agen(["", "a", "", "b"]))]
        assert snapshots == ["a", "ab"]


class TestSolveRequest:
    def test_text_only(self):
        assert not SolveRequest("Find the area").has_image

    def test_image_only(self):
        request = SolveRequest(image=b"\x89PNG", image_mime_type="image/png")
        assert request.has_image

    def test_empty_request_rejected(self):
        with pytest.raises(ValueError):
            SolveRequest("   ")

    def test_image_needs_media_type(self):
        with pytest.raises(ValueError):
            SolveRequest("see picture", image=b"\x89PNG")


@pytest.mark.asyncio
class TestGeometrySolver:
    async def test_solves_and_reports_progress(self):
        chunks = _chunks(RESPONSE)
        solver = GeometrySolver(ScriptedProvider(chunks))
        seen: list[str] = []

        result = await solver.solve(SolveRequest("pyramid"), on_progress=seen.append)

        assert result["finalAnswer"] == "32"
        assert len(result["steps"]) == 1
        assert len(seen) == len(chunks)
        assert all(b.startswith(a) for a, b in zip(seen, seen[1:]))
        assert seen[-1] == RESPONSE
        assert solver.status == SolveStatus.COMPLETE
        assert solver.last_text == RESPONSE

    async def test_prompt_and_image_reach_provider(self):
        provider = ScriptedProvider([RESPONSE])
        solver = GeometrySolver(provider)
        request = SolveRequest(
            "the pictured cone", image=b"jpegbytes", image_mime_type="image/jpeg"
        )

        await solver.solve(request)

        prompt, image, mime = provider.calls[0]
        assert "the pictured cone" in prompt
        assert "Analyze the image" in prompt
        assert image == b"jpegbytes"
        assert mime == "image/jpeg"

    async def test_status_starts_idle(self):
        assert GeometrySolver(ScriptedProvider([])).status == SolveStatus.IDLE

    async def test_no_provider_is_config_error(self):
        with pytest.raises(ConfigError):
            await GeometrySolver().solve(SolveRequest("q"))

    async def test_transport_failure_skips_extraction(self, monkeypatch):
        def _must_not_run(text):
            raise AssertionError("extraction ran on partial text")

        monkeypatch.setattr(
            "geo_tutor.reasoning.solver.extract_solution", _must_not_run
        )
        provider = ScriptedProvider(
            _chunks(RESPONSE)[:3], error=ConnectionError("connection reset by peer")
        )
        solver = GeometrySolver(provider)

        with pytest.raises(ProviderError) as exc_info:
            await solver.solve(SolveRequest("q"))

        assert type(exc_info.value) is ProviderError
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert solver.status == SolveStatus.FAILED
        assert solver.last_text == "".join(_chunks(RESPONSE)[:3])

    async def test_auth_error_classified(self):
        provider = ScriptedProvider([], error=RuntimeError("401 Unauthorized"))
        with pytest.raises(ProviderAuthError):
            await GeometrySolver(provider).solve(SolveRequest("q"))

    async def test_rate_limit_classified(self):
        provider = ScriptedProvider(
            [], error=RuntimeError("429 RESOURCE_EXHAUSTED: quota exceeded")
        )
        with pytest.raises(ProviderRateLimitError):
            await GeometrySolver(provider).solve(SolveRequest("q"))

    async def test_timeout(self):
        provider = ScriptedProvider(_chunks(RESPONSE), delay=0.5)
        solver = GeometrySolver(provider, timeout=0.05)

        with pytest.raises(ProviderTimeoutError):
            await solver.solve(SolveRequest("q"))
        assert solver.status == SolveStatus.FAILED

    async def test_unusable_output_fails(self):
        solver = GeometrySolver(ScriptedProvider(["<thinking>I ran out of"]))
        with pytest.raises(ExtractionNotFoundError):
            await solver.solve(SolveRequest("q"))
        assert solver.status == SolveStatus.FAILED

    async def test_busy_while_receiving(self):
        gate = asyncio.Event()
        solver = GeometrySolver(ScriptedProvider([RESPONSE], gate=gate))

        task = asyncio.create_task(solver.solve(SolveRequest("first")))
        await asyncio.sleep(0)
        assert solver.status == SolveStatus.RECEIVING

        with pytest.raises(SolverBusyError):
            await solver.solve(SolveRequest("second"))
        with pytest.raises(SolverBusyError):
            solver.set_provider(None)

        gate.set()
        result = await task
        assert result["finalAnswer"] == "32"

    async def test_can_solve_again_after_failure(self):
        provider = ScriptedProvider(["no json here"])
        solver = GeometrySolver(provider)
        with pytest.raises(ExtractionNotFoundError):
            await solver.solve(SolveRequest("q"))

        solver.set_provider(ScriptedProvider([RESPONSE]))
        result = await solver.solve(SolveRequest("q"))
        assert result["problemSummary"] == "pyramid volume"

    async def test_failing_progress_sink_does_not_abort(self):
        def broken_sink(text):
            raise RuntimeError("display gone")

        solver = GeometrySolver(ScriptedProvider(_chunks(RESPONSE)))
        result = await solver.solve(SolveRequest("q"), on_progress=broken_sink)
        assert result["finalAnswer"] == "32"

    async def test_cancellation_marks_failed(self):
        gate = asyncio.Event()
        solver = GeometrySolver(ScriptedProvider([RESPONSE], gate=gate))

        task = asyncio.create_task(solver.solve(SolveRequest("q")))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert solver.status == SolveStatus.FAILED

    async def test_abort_marks_failed_and_frees_solver(self):
        class Abort(BaseException):
            pass

        solver = GeometrySolver(ScriptedProvider(["<thinking>Base"], error=Abort()))
        with pytest.raises(Abort):
            await solver.solve(SolveRequest("q"))
        assert solver.status == SolveStatus.FAILED

        solver.set_provider(ScriptedProvider([RESPONSE]))
        result = await solver.solve(SolveRequest("q"))
        assert result["finalAnswer"] == "32"
        assert solver.status == SolveStatus.COMPLETE

    async def test_provider_info(self):
        solver = GeometrySolver(ScriptedProvider([]))
        assert solver.provider_info == {
            "configured": True,
            "provider": "scripted",
            "model": "scripted-v1",
        }
        assert GeometrySolver().provider_info == {"configured": False}

    async def test_default_timeout(self):
        assert LLM_CALL_TIMEOUT == 180.0
