"""
Core ai-commit engine that orchestrates all components.
"""

from typing import Any, Dict, Optional
from pathlib import Path
from loguru import logger
from rich.markup import escape

from .config.settings import Settings, ConfigurationError
from .git_ops.repository import GitRepository, GitRepositoryError
from .ai_backends.base import AIBackend
from .ai_backends.lmstudio import LMStudioBackend
from .lmstudio.base import EnsureResult, LMStudioError
from .lmstudio.manager import LMStudioManager
from .utils.message_extractor import MessageExtractor
from .utils.prompts import PromptBuilder
from .ui.console import AICommitConsole


class AICommit:
    """Core ai-commit application engine."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        repo_path: Optional[Path] = None,
        console: Optional[AICommitConsole] = None,
        manager: Optional[LMStudioManager] = None,
        ai_backend: Optional[AIBackend] = None,
    ):
        """Initialize ai-commit with settings and repository."""
        self.settings = settings or Settings()
        self.repo_path = repo_path
        self.console = console or AICommitConsole(self.settings)
        self.manager = manager or LMStudioManager(self.settings.lmstudio, console=self.console)
        self.ai_backend = ai_backend or LMStudioBackend(
            api_url=self.settings.lmstudio.base_url,
            model=self.settings.lmstudio.model,
            api_key=self.settings.lmstudio.api_key,
            temperature=self.settings.commit.temperature,
            timeout=self.settings.commit.timeout,
        )
        self.prompt_builder = PromptBuilder()
        self.message_extractor = MessageExtractor(self.settings.commit.character_limit)
        self._git_repo: Optional[GitRepository] = None

    @property
    def git_repo(self) -> GitRepository:
        if self._git_repo is None:
            try:
                self._git_repo = GitRepository(self.repo_path)
            except GitRepositoryError as e:
                raise AICommitError(str(e))
        return self._git_repo

    async def ensure_server(self) -> EnsureResult:
        """Validate configuration and bring LM Studio up."""
        try:
            self.settings.validate_required()
            return await self.manager.ensure_running()
        except (ConfigurationError, LMStudioError) as e:
            raise AICommitError(str(e))

    async def run(self, no_commit: bool = False) -> str:
        """Suggest a commit message for the staged changes and optionally commit it.

        Returns the suggested message whether or not it was committed.
        """
        try:
            self.settings.validate_required()
        except ConfigurationError as e:
            raise AICommitError(str(e))

        try:
            diff = self.git_repo.get_staged_diff()
            staged_files = self.git_repo.get_staged_files()
        except GitRepositoryError as e:
            raise AICommitError(str(e))

        if not diff:
            raise AICommitError("No staged changes. Stage something first with `git add`.")

        self.console.print_staged_files(staged_files)

        await self.ensure_server()
        self.console.show_ai_backend_info(self.settings.lmstudio.base_url, self.settings.lmstudio.model)

        message = await self.generate_commit_message(diff)
        self.console.show_commit_message_preview(message)

        if no_commit:
            return message

        if not self.settings.ui.interactive:
            self.console.print_info("Interactive confirmation disabled, not committing.")
            return message

        if not self.console.confirm_action(
            "Use this commit message?",
            default=False,
            timeout=self.settings.ui.confirm_timeout,
        ):
            self.console.print_info("Aborted. You can copy/edit the message manually.")
            return message

        try:
            commit_hash = self.git_repo.commit(message)
        except GitRepositoryError as e:
            raise AICommitError(str(e))

        self.console.print_success(f"Created commit {commit_hash[:8]}")
        return message

    async def generate_commit_message(self, diff: str) -> str:
        """Ask the model for a commit message describing `diff`."""
        prompt = self.prompt_builder.build_commit_prompt(diff)

        try:
            with self.console.show_progress_spinner("Generating commit message"):
                response = await self.ai_backend.call_with_retry(
                    prompt,
                    system_prompt=self.prompt_builder.system_prompt,
                    max_retries=self.settings.commit.max_retries,
                )
        except Exception as e:
            logger.debug(f"Generation failed: {e!r}")
            raise AICommitError(f"API request failed: {e}")

        message = self.message_extractor.extract_commit_message(response.content)
        if not message:
            raise AICommitError("The model returned no usable commit message")
        return message

    async def check_status(self) -> Dict[str, Any]:
        """Report server and `lms` state without starting anything."""
        lmstudio = self.settings.lmstudio
        reachable = await self.manager.probe(lmstudio.base_url, lmstudio.api_key)
        cli_available = await self.manager.cli_available()
        return {
            "base_url": lmstudio.base_url,
            "reachable": reachable,
            "cli_available": cli_available,
            "cli_server_running": await self.manager.cli.server_status() if cli_available else None,
            "models": await self.ai_backend.list_models() if reachable else [],
        }

    def show_configuration(self) -> None:
        """Show current configuration."""
        lmstudio = self.settings.lmstudio
        out = self.console.console

        out.print("[bold blue]ai-commit Configuration[/bold blue]")
        out.print()

        out.print("[bold]LM Studio:[/bold]")
        out.print(f"  Model: {lmstudio.model}" + ("" if lmstudio.has_model else " [red](not set)[/red]"))
        out.print(f"  Base URL: {lmstudio.base_url}")
        out.print(f"  Start command: {escape(lmstudio.start_command or '(platform default)')}")
        out.print(f"  Auto-start: {'disabled' if lmstudio.auto_start_disabled else 'enabled'}")
        out.print(f"  Load model: {lmstudio.load_model}")
        out.print(f"  GPU: {lmstudio.gpu}")
        out.print(f"  Context length: {lmstudio.context_length or '(default)'}")
        out.print(f"  Model identifier: {lmstudio.model_identifier or '(none)'}")
        out.print(f"  lms CLI: {lmstudio.cli_path}")
        out.print(f"  Startup timeout: {lmstudio.startup_timeout:g}s")
        out.print()

        out.print("[bold]Generation:[/bold]")
        out.print(f"  Temperature: {self.settings.commit.temperature}")
        out.print(f"  Timeout: {self.settings.commit.timeout}s")
        out.print(f"  Max retries: {self.settings.commit.max_retries}")
        out.print(f"  Character limit: {self.settings.commit.character_limit}")
        out.print()

        out.print("[bold]Interface:[/bold]")
        out.print(f"  Interactive: {self.settings.ui.interactive}")
        out.print(f"  Confirm timeout: {self.settings.ui.confirm_timeout:g}s")
        out.print(f"  Log level: {self.settings.ui.log_level}")
        out.print(f"  Log file: {self.settings.log_file}")


class AICommitError(Exception):
    """Custom exception for ai-commit operations."""
