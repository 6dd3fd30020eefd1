"""
Tests for the `lms` command wrapper.
"""

import asyncio
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

from ai_commit.lmstudio.cli_tool import LMSCli, CommandResult


def fake_process(returncode=0, stdout=b"", stderr=b"", hang=False):
    process = MagicMock()
    process.returncode = returncode

    async def communicate():
        if hang:
            await asyncio.sleep(10)
        return stdout, stderr

    process.communicate = communicate
    process.wait = AsyncMock(return_value=returncode)
    return process


@pytest.fixture
def spawn(mocker):
    return mocker.patch(
        "ai_commit.lmstudio.cli_tool.asyncio.create_subprocess_exec",
        new_callable=AsyncMock,
    )


class TestCommandResult:
    def test_ok(self):
        assert CommandResult(0).ok
        assert not CommandResult(1).ok


class TestRun:
    async def test_captures_output(self, spawn):
        spawn.return_value = fake_process(0, b"LM Studio CLI 0.3.5\n", b"")

        result = await LMSCli().run("version", timeout=2.0)

        assert result.ok
        assert result.stdout == "LM Studio CLI 0.3.5\n"
        assert spawn.call_args.args == ("lms", "version")

    async def test_custom_executable(self, spawn):
        spawn.return_value = fake_process(0)

        await LMSCli("/opt/lmstudio/bin/lms").run("ps")

        assert spawn.call_args.args == ("/opt/lmstudio/bin/lms", "ps")

    async def test_timeout_kills_process(self, spawn):
        process = fake_process(hang=True)
        spawn.return_value = process

        with pytest.raises(asyncio.TimeoutError):
            await LMSCli().run("server", "start", timeout=0.05)

        process.kill.assert_called_once()
        process.wait.assert_awaited_once()


class TestDetection:
    async def test_available(self, spawn):
        spawn.return_value = fake_process(0)
        assert await LMSCli().is_available() is True

    async def test_non_zero_exit(self, spawn):
        spawn.return_value = fake_process(1)
        assert await LMSCli().is_available() is False

    async def test_missing_executable(self, spawn):
        spawn.side_effect = FileNotFoundError("lms")
        assert await LMSCli().is_available() is False

    async def test_hanging_version(self, spawn, mocker):
        mocker.patch("ai_commit.lmstudio.cli_tool.VERSION_TIMEOUT", 0.05)
        spawn.return_value = fake_process(hang=True)
        assert await LMSCli().is_available() is False

    async def test_real_missing_binary(self):
        assert await LMSCli("definitely-not-an-lms-binary").is_available() is False

    async def test_real_failing_binary(self):
        # `python version` fails because there is no script named "version"
        assert await LMSCli(sys.executable).is_available() is False


class TestSubcommands:
    async def test_server_status(self, spawn):
        spawn.return_value = fake_process(0)
        assert await LMSCli().server_status() is True
        assert spawn.call_args.args == ("lms", "server", "status")

    async def test_start_server_failure(self, spawn):
        spawn.return_value = fake_process(1, b"", b"port in use")
        assert await LMSCli().start_server() is False

    async def test_list_loaded(self, spawn):
        spawn.return_value = fake_process(0, b"LOADED MODELS\nqwen2.5-coder-7b-instruct\n")
        output = await LMSCli().list_loaded()
        assert "qwen2.5-coder-7b-instruct" in output

    async def test_list_loaded_failure(self, spawn):
        spawn.return_value = fake_process(1, b"partial")
        assert await LMSCli().list_loaded() is None

    async def test_list_loaded_missing_binary(self, spawn):
        spawn.side_effect = FileNotFoundError("lms")
        assert await LMSCli().list_loaded() is None

    async def test_load_passes_arguments(self, spawn):
        spawn.return_value = fake_process(0)
        result = await LMSCli().load(["load", "my-model", "--gpu=max"])
        assert result.ok
        assert spawn.call_args.args == ("lms", "load", "my-model", "--gpu=max")
