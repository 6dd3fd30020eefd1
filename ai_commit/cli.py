"""
CLI interface using Typer with Rich integration.
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from loguru import logger

from .core import AICommit, AICommitError
from .config.settings import Settings, ConfigurationError


ENV_HELP = """
[bold blue]Environment variables:[/bold blue]

  [green]LMSTUDIO_MODEL[/green]             Model ID to use (required)
  [green]LMSTUDIO_BASE_URL[/green]          API base URL (default: http://localhost:1234/v1)
  [green]LMSTUDIO_API_KEY[/green]           API key (default: lm-studio)
  [green]LMSTUDIO_START_COMMAND[/green]     Command to start LM Studio if not running
                             (default: lms server start or platform-specific; "false" disables)
  [green]LMSTUDIO_LOAD_MODEL[/green]        Load the model with lms when missing (default: true)
  [green]LMSTUDIO_GPU[/green]               GPU offload: auto, max or 0.0-1.0 (default: auto)
  [green]LMSTUDIO_CONTEXT_LENGTH[/green]    Context length for lms load
  [green]LMSTUDIO_MODEL_IDENTIFIER[/green]  Identifier for the loaded model
  [green]LMSTUDIO_STARTUP_TIMEOUT[/green]   Seconds to wait for the server (default: 30)
  [green]COMMIT_TEMPERATURE[/green]         Temperature for generation (default: 0.3)
"""

app = typer.Typer(
    name="ai-commit",
    help="Suggest a commit message for staged changes using a local LM Studio model",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=False
)

console = Console()


def setup_logging(log_level: str = "WARNING", log_file: Optional[Path] = None):
    """Setup logging configuration."""
    logger.remove()

    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        colorize=True
    )

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"File logging disabled, cannot create {log_file.parent}: {e}")
            return
        logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="1 MB",
            retention="7 days"
        )


def load_settings(config_file: Optional[Path] = None) -> Settings:
    """Build the settings once; environment first, optional JSON file on top."""
    try:
        if config_file:
            return Settings.from_file(config_file)
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _prepare(config_file: Optional[Path], verbose: bool, debug: bool) -> Settings:
    settings = load_settings(config_file)

    # Debug overrides verbose
    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = settings.ui.log_level
    setup_logging(log_level, settings.log_file)
    return settings


def _run(coro_factory, config_file: Optional[Path], verbose: bool, debug: bool):
    """Run an async command with the shared error handling."""
    try:
        settings = _prepare(config_file, verbose, debug)
        return asyncio.run(coro_factory(settings))
    except (AICommitError, ConfigurationError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        raise typer.Exit(130)
    except typer.Exit:
        raise
    except Exception as e:
        logger.exception("Unexpected error occurred")
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(1)


ConfigOption = typer.Option(None, "--config", "-c", help="Path to a JSON configuration file")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable verbose logging")
DebugOption = typer.Option(False, "--debug", "-d", help="Enable debug logging (includes verbose)")


@app.callback(invoke_without_command=True, epilog=ENV_HELP)
def main_callback(
    ctx: typer.Context,
    no_commit: bool = typer.Option(
        False, "--no-commit", "-n",
        help="Show suggested message without committing"
    ),
    config_file: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    debug: bool = DebugOption,
    repo_path: Optional[Path] = typer.Option(
        None, "--repo", "-r",
        help="Git repository path (default: current directory)"
    ),
    version: bool = typer.Option(
        False, "--version",
        help="Show version information"
    )
):
    """
    Suggest a one-line commit message for the staged changes.

    LM Studio is started automatically when it is not running.

    [bold blue]Examples:[/bold blue]

    [green]ai-commit[/green]                 # Suggest, confirm and commit
    [green]ai-commit --no-commit[/green]     # Only print the suggestion
    [green]ai-commit server[/green]          # Start LM Studio and load the model
    [green]ai-commit status[/green]          # Show LM Studio status
    [green]ai-commit config --show[/green]   # Show configuration
    """
    if version:
        from . import __version__
        console.print(f"[bold blue]ai-commit[/bold blue] version [green]{__version__}[/green]")
        return

    if ctx.invoked_subcommand is None:
        async def commit(settings: Settings):
            ai_commit = AICommit(settings, repo_path)
            return await ai_commit.run(no_commit=no_commit)

        _run(commit, config_file, verbose, debug)


@app.command()
def server(
    config_file: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    debug: bool = DebugOption,
):
    """
    Make sure LM Studio is running and the model is loaded.
    """
    async def ensure(settings: Settings):
        return await AICommit(settings).ensure_server()

    _run(ensure, config_file, verbose, debug)


@app.command()
def status(
    config_file: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    debug: bool = DebugOption,
):
    """
    Show whether LM Studio and the lms CLI are available, without starting anything.
    """
    async def check(settings: Settings):
        result = await AICommit(settings).check_status()

        def mark(value: Optional[bool]) -> str:
            if value is None:
                return "[dim]n/a[/dim]"
            return "[green]✓ yes[/green]" if value else "[red]✗ no[/red]"

        console.print(f"[bold blue]LM Studio at {result['base_url']}[/bold blue]")
        console.print(f"  API reachable: {mark(result['reachable'])}")
        console.print(f"  lms CLI available: {mark(result['cli_available'])}")
        console.print(f"  lms server status: {mark(result['cli_server_running'])}")
        if result["models"]:
            console.print(f"  Models: {', '.join(result['models'])}", highlight=False)
        return result

    result = _run(check, config_file, verbose, debug)
    if not result["reachable"]:
        raise typer.Exit(1)


@app.command()
def config(
    show: bool = typer.Option(
        False, "--show", "-s",
        help="Show current configuration"
    ),
    config_file: Optional[Path] = ConfigOption,
):
    """
    Show ai-commit configuration.
    """
    try:
        settings = load_settings(config_file)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(1)

    if show:
        AICommit(settings).show_configuration()
    else:
        console.print("Use [green]--show[/green] to see current configuration")


def main():
    """Main entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
