"""
Tests for the LM Studio reachability probe.
"""

import asyncio

from aiohttp import web
from aiohttp import test_utils

from ai_commit.lmstudio.probe import is_server_reachable, models_url


def make_app(status: int = 200, delay: float = 0.0, seen_headers: list = None):
    async def list_models(request):
        if seen_headers is not None:
            seen_headers.append(dict(request.headers))
        if delay:
            await asyncio.sleep(delay)
        return web.json_response({"data": [{"id": "test-model"}]}, status=status)

    app = web.Application()
    app.router.add_get("/v1/models", list_models)
    return app


def base_url(server: test_utils.TestServer) -> str:
    return str(server.make_url("/v1"))


class TestModelsUrl:
    def test_appends_models(self):
        assert models_url("http://localhost:1234/v1") == "http://localhost:1234/v1/models"

    def test_strips_trailing_slash(self):
        assert models_url("http://localhost:1234/v1/") == "http://localhost:1234/v1/models"


class TestIsServerReachable:
    async def test_success_status(self):
        async with test_utils.TestServer(make_app()) as server:
            assert await is_server_reachable(base_url(server), "lm-studio") is True

    async def test_sends_bearer_token(self):
        headers = []
        async with test_utils.TestServer(make_app(seen_headers=headers)) as server:
            await is_server_reachable(base_url(server), "secret-key")

        assert headers[0]["Authorization"] == "Bearer secret-key"

    async def test_error_status(self):
        for status in (401, 404, 500, 503):
            async with test_utils.TestServer(make_app(status=status)) as server:
                assert await is_server_reachable(base_url(server), "lm-studio") is False

    async def test_timeout(self):
        async with test_utils.TestServer(make_app(delay=1.0)) as server:
            loop = asyncio.get_running_loop()
            started = loop.time()
            assert await is_server_reachable(base_url(server), "lm-studio", timeout=0.1) is False
            assert loop.time() - started < 0.9

    async def test_connection_refused(self):
        url = f"http://127.0.0.1:{test_utils.unused_port()}/v1"
        assert await is_server_reachable(url, "lm-studio") is False

    async def test_invalid_url(self):
        assert await is_server_reachable("not a url", "lm-studio") is False
