"""
Brings the local LM Studio server up and makes sure the model is loaded.
"""

from typing import Optional
from loguru import logger

from .base import (
    AutoStartDisabledError,
    EnsureResult,
    LoadOutcome,
    LoadStatus,
    ModelLoadError,
    ServerLaunchError,
    ServerStartTimeoutError,
    ServerState,
)
from .cli_tool import LMSCli
from .launcher import ServerLauncher
from .loader import ModelLoader
from .poller import ProbeFunc, wait_for_server
from .probe import is_server_reachable
from ..config.settings import ServerConfig
from ..ui.console import AICommitConsole


class LMStudioManager:
    """Lifecycle manager for the local inference server.

    `lms` availability is queried at most once per `ensure_running` call
    and reused for both the launch and the model-load stage.
    """

    def __init__(
        self,
        config: ServerConfig,
        console: Optional[AICommitConsole] = None,
        cli: Optional[LMSCli] = None,
        launcher: Optional[ServerLauncher] = None,
        loader: Optional[ModelLoader] = None,
        probe: Optional[ProbeFunc] = None,
    ):
        self.config = config
        self.console = console or AICommitConsole()
        self.cli = cli or LMSCli(config.cli_path)
        self.launcher = launcher or ServerLauncher(self.cli)
        self.loader = loader or ModelLoader(self.cli)
        self.probe = probe or is_server_reachable
        self.state = ServerState.UNCHECKED
        self._cli_available: Optional[bool] = None

    def _transition(self, state: ServerState) -> None:
        logger.debug(f"LM Studio state: {self.state.value} -> {state.value}")
        self.state = state

    async def cli_available(self) -> bool:
        """Whether `lms` responds, checked once per run."""
        if self._cli_available is None:
            self._cli_available = await self.cli.is_available()
            logger.debug(f"lms CLI available: {self._cli_available}")
        return self._cli_available

    async def ensure_running(self) -> EnsureResult:
        """Make sure the server answers requests, starting it if needed.

        Raises AutoStartDisabledError, ServerLaunchError or
        ServerStartTimeoutError; model-load problems only produce a warning.
        """
        # server state may have changed since a previous run
        self._cli_available = None
        self._transition(ServerState.CHECKING)
        self.console.print_info("Checking if LM Studio is running...")

        if await self.probe(self.config.base_url, self.config.api_key):
            self._transition(ServerState.RUNNING)
            self.console.print_success("LM Studio is already running")
        else:
            self._transition(ServerState.NOT_RUNNING)
            self.console.print_warning("LM Studio is not running")
            await self._start_server()

        load = await self._load_model_stage()
        return EnsureResult(self.state, load)

    async def _start_server(self) -> None:
        if self.config.auto_start_disabled:
            self._transition(ServerState.DISABLED)
            raise AutoStartDisabledError(
                "LM Studio is not running and auto-start is disabled. "
                "Start LM Studio manually or set LMSTUDIO_START_COMMAND."
            )

        self._transition(ServerState.LAUNCHING)
        # lms is only consulted when no custom command overrides it
        has_cli = False if self.config.start_command else await self.cli_available()
        outcome = await self.launcher.launch(self.config.start_command, has_cli)

        if not outcome.ok:
            self._transition(ServerState.LAUNCH_FAILED)
            raise ServerLaunchError(
                f"Failed to start LM Studio with `{outcome.method}`: {outcome.reason}. "
                "Install LM Studio or set LMSTUDIO_START_COMMAND to a working command."
            )
        self.console.print_info(f"Started LM Studio with `{outcome.method}`")

        self._transition(ServerState.POLLING)
        with self.console.show_progress_spinner("Waiting for LM Studio to start"):
            ready = await wait_for_server(
                self.config.base_url,
                self.config.api_key,
                max_wait=self.config.startup_timeout,
                interval=self.config.poll_interval,
                probe=self.probe,
            )

        if not ready:
            self._transition(ServerState.TIMED_OUT)
            raise ServerStartTimeoutError(
                f"LM Studio did not start within {self.config.startup_timeout:g}s. "
                "Ensure LM Studio is installed and the start command is correct; "
                "set LMSTUDIO_START_COMMAND to customize the start command."
            )

        self._transition(ServerState.READY)
        self.console.print_success("LM Studio is ready")

    async def _load_model_stage(self) -> Optional[LoadOutcome]:
        if not self.config.load_model or not self.config.has_model:
            return None

        model = self.config.model
        if not await self.cli_available():
            self.console.print_info(
                "`lms` CLI not available - skipping automatic model loading. "
                "If using the GUI, make sure the model is loaded."
            )
            return LoadOutcome(LoadStatus.SKIPPED, model, reason="lms CLI not available")

        try:
            with self.console.show_progress_spinner(f"Loading model {model}"):
                outcome = await self.loader.ensure_loaded(self.config)
        except ModelLoadError as e:
            logger.warning(str(e))
            self.console.print_warning(
                f"Failed to load model automatically: {e}. "
                "Load it manually; it may already be loaded via the GUI."
            )
            return LoadOutcome(LoadStatus.FAILED, model, reason=str(e))

        if outcome.status is LoadStatus.ALREADY_LOADED:
            self.console.print_success("Model is already loaded")
        else:
            self.console.print_success(f"Model {model} loaded")
        return outcome
