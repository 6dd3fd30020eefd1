"""
Tests for the readiness poller.
"""

import asyncio

from ai_commit.lmstudio.poller import wait_for_server


class ProbeRecorder:
    """Probe double returning scripted results."""

    def __init__(self, results=None, default=False):
        self.results = list(results or [])
        self.default = default
        self.calls = 0

    async def __call__(self, base_url, api_key):
        self.calls += 1
        if self.results:
            return self.results.pop(0)
        return self.default


async def timed(coro):
    loop = asyncio.get_running_loop()
    started = loop.time()
    result = await coro
    return result, loop.time() - started


class TestWaitForServer:
    async def test_times_out_after_max_wait(self):
        probe = ProbeRecorder(default=False)

        ready, elapsed = await timed(wait_for_server(
            "http://localhost:1234/v1", "lm-studio", max_wait=0.3, interval=0.1, probe=probe,
        ))

        assert ready is False
        assert probe.calls >= 3
        assert elapsed >= 0.3
        assert elapsed < 0.6

    async def test_returns_on_first_success(self):
        probe = ProbeRecorder(results=[True])

        ready, elapsed = await timed(wait_for_server(
            "http://localhost:1234/v1", "lm-studio", max_wait=5.0, interval=1.0, probe=probe,
        ))

        assert ready is True
        assert probe.calls == 1
        assert elapsed < 0.5

    async def test_sleeps_one_interval_between_attempts(self, mocker):
        sleep = mocker.patch("ai_commit.lmstudio.poller.asyncio.sleep", new=mocker.AsyncMock())
        probe = ProbeRecorder(results=[False, False, True])

        ready = await wait_for_server(
            "http://localhost:1234/v1", "lm-studio", max_wait=30.0, interval=1.0, probe=probe,
        )

        assert ready is True
        assert probe.calls == 3
        assert [c.args for c in sleep.await_args_list] == [(1.0,), (1.0,)]

    async def test_reports_attempts(self):
        attempts = []
        probe = ProbeRecorder(results=[False, True])

        await wait_for_server(
            "http://localhost:1234/v1", "lm-studio", max_wait=1.0, interval=0.01,
            probe=probe, on_attempt=attempts.append,
        )

        assert attempts == [1, 2]
