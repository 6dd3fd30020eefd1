"""
Async wrapper around the `lms` command-line tool that ships with LM Studio.
"""

import asyncio
import contextlib
import subprocess
from dataclasses import dataclass
from typing import Optional
from loguru import logger


VERSION_TIMEOUT = 2.0
STATUS_TIMEOUT = 2.0
PS_TIMEOUT = 3.0
SERVER_START_TIMEOUT = 30.0
LOAD_TIMEOUT = 60.0


@dataclass
class CommandResult:
    """Captured result of one `lms` invocation."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class LMSCli:
    """Runs `lms` subcommands with bounded waits."""

    def __init__(self, executable: str = "lms"):
        self.executable = executable

    async def run(self, *args: str, timeout: Optional[float] = None) -> CommandResult:
        """Run `lms <args>` and capture its output.

        Raises OSError when the executable cannot be spawned and
        asyncio.TimeoutError when it outlives `timeout`; the process is
        killed in that case.
        """
        cmd = [self.executable, *args]
        logger.debug(f"Running: {' '.join(cmd)} (timeout={timeout})")

        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
        except asyncio.TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            raise

        result = CommandResult(
            returncode=process.returncode,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )
        logger.debug(f"{' '.join(cmd)} exited with {result.returncode}")
        return result

    async def _succeeds(self, *args: str, timeout: Optional[float]) -> bool:
        try:
            result = await self.run(*args, timeout=timeout)
        except (OSError, asyncio.TimeoutError) as e:
            logger.debug(f"`{self.executable} {' '.join(args)}` unavailable: {e!r}")
            return False
        return result.ok

    async def is_available(self) -> bool:
        """Whether `lms` is installed and answers `lms version`."""
        return await self._succeeds("version", timeout=VERSION_TIMEOUT)

    async def server_status(self) -> bool:
        """Whether `lms server status` reports a running server."""
        return await self._succeeds("server", "status", timeout=STATUS_TIMEOUT)

    async def start_server(self) -> bool:
        """Start the headless server; True if `lms server start` exited 0."""
        return await self._succeeds("server", "start", timeout=SERVER_START_TIMEOUT)

    async def list_loaded(self) -> Optional[str]:
        """Output of `lms ps`, or None if it could not be obtained."""
        try:
            result = await self.run("ps", timeout=PS_TIMEOUT)
        except (OSError, asyncio.TimeoutError) as e:
            logger.debug(f"`{self.executable} ps` failed: {e!r}")
            return None
        if not result.ok:
            return None
        return result.stdout

    async def load(self, args: list[str], timeout: float = LOAD_TIMEOUT) -> CommandResult:
        """Run `lms load ...`; `args` starts with the `load` subcommand."""
        return await self.run(*args, timeout=timeout)
