"""
Starts the LM Studio server as a detached background process.
"""

import os
import platform
import subprocess
from typing import List, Optional, Union
from loguru import logger

from .base import LaunchOutcome
from .cli_tool import LMSCli


GUI_APP_NAME = "LM Studio"


def default_start_command(system: str) -> Optional[str]:
    """Shell command used when neither `lms` nor a custom command applies.

    macOS has none: the GUI application is opened by name instead.
    """
    if system == "Darwin":
        return None
    if system == "Windows":
        return "start lmstudio"
    return "lmstudio"


def spawn_detached(command: Union[str, list[str]], shell: bool = False) -> subprocess.Popen:
    """Spawn a process that outlives this one and return its handle.

    Output is discarded and the child is never waited on. Callers keep the
    handle for as long as they run; dropping a live Popen makes CPython
    warn that the subprocess is still running.
    """
    kwargs = {
        "stdin": subprocess.DEVNULL,
        "stdout": subprocess.DEVNULL,
        "stderr": subprocess.DEVNULL,
        "shell": shell,
        "close_fds": True,
    }
    if os.name == "nt":
        kwargs["creationflags"] = (
            subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
        )
    else:
        kwargs["start_new_session"] = True

    process = subprocess.Popen(command, **kwargs)
    logger.debug(f"Spawned detached process {process.pid}: {command}")
    return process


class ServerLauncher:
    """Chooses how to start LM Studio and issues the start attempt.

    A custom start command always wins. Without one, `lms server start` is
    tried first when the CLI is available, then the platform default.
    """

    def __init__(self, cli: LMSCli, system: Optional[str] = None):
        self.cli = cli
        self.system = system or platform.system()
        # Handles of spawned children, kept alive while this process runs
        self.processes: List[subprocess.Popen] = []

    async def launch(self, start_command: Optional[str], cli_available: bool) -> LaunchOutcome:
        if not start_command:
            if cli_available:
                logger.info("Starting LM Studio server with `lms server start`")
                if await self.cli.start_server():
                    return LaunchOutcome.started("lms server start")
                logger.warning("`lms server start` failed, falling back to the application")

            if self.system == "Darwin":
                args = ["open", "-a", GUI_APP_NAME]
                return self._spawn(args, shell=False, method=f"open -a {GUI_APP_NAME}")

            start_command = default_start_command(self.system)

        return self._spawn(start_command, shell=True, method=start_command)

    def _spawn(self, command: Union[str, list[str]], shell: bool, method: str) -> LaunchOutcome:
        logger.info(f"Starting LM Studio with: {method}")
        try:
            process = spawn_detached(command, shell=shell)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to spawn `{method}`: {e}")
            return LaunchOutcome.failed(str(e), method=method)
        self.processes.append(process)
        return LaunchOutcome.started(method)
