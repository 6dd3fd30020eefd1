"""
Configuration management with Pydantic validation and environment variable support.
"""

import os
import json
from pathlib import Path
from typing import Optional, Literal
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import platform


PLACEHOLDER_MODEL = "YOUR_MODEL_ID_HERE"

# Start command values that opt out of automatic server startup
DISABLED_START_COMMANDS = ("false", "0")


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""


class ServerConfig(BaseSettings):
    """LM Studio server configuration.

    Built once at startup and passed by value to the lifecycle manager,
    so it is frozen.
    """

    model_config = SettingsConfigDict(
        env_prefix="LMSTUDIO_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        protected_namespaces=(),
    )

    model: str = Field(
        default=PLACEHOLDER_MODEL,
        description="Model ID to use for generation"
    )
    base_url: str = Field(
        default="http://localhost:1234/v1",
        description="OpenAI-compatible API base URL"
    )
    api_key: str = Field(
        default="lm-studio",
        description="API key sent as a Bearer token"
    )
    start_command: Optional[str] = Field(
        default=None,
        description="Command to start LM Studio, or \"false\"/\"0\" to disable auto-start"
    )
    load_model: bool = Field(
        default=True,
        description="Load the model with the lms CLI when it is not loaded"
    )
    gpu: str = Field(
        default="auto",
        description="GPU offload: \"auto\", \"max\" or a ratio between 0.0 and 1.0"
    )
    context_length: Optional[int] = Field(
        default=None,
        gt=0,
        description="Context length passed to lms load"
    )
    model_identifier: Optional[str] = Field(
        default=None,
        description="Identifier to assign to the loaded model"
    )
    cli_path: str = Field(
        default="lms",
        description="Path or name of the lms executable"
    )
    startup_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait for the server after launching it"
    )
    poll_interval: float = Field(
        default=1.0,
        gt=0,
        description="Seconds between readiness checks"
    )

    @field_validator("start_command", "context_length", "model_identifier", mode="before")
    @classmethod
    def empty_as_unset(cls, v):
        """Treat blank values, such as `""` in a config file, as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def has_model(self) -> bool:
        """Whether a real model ID is configured."""
        return bool(self.model) and self.model != PLACEHOLDER_MODEL

    @property
    def auto_start_disabled(self) -> bool:
        return self.start_command in DISABLED_START_COMMANDS


class CommitSettings(BaseSettings):
    """Commit message generation configuration."""

    model_config = SettingsConfigDict(
        env_prefix="COMMIT_", env_file=".env", env_ignore_empty=True, extra="ignore"
    )

    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for generation"
    )
    timeout: int = Field(
        default=120,
        ge=10,
        le=600,
        description="API request timeout in seconds"
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum number of API attempts"
    )
    character_limit: int = Field(
        default=150,
        ge=50,
        le=300,
        description="Maximum commit message character limit"
    )


class UISettings(BaseSettings):
    """User interface configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AI_COMMIT_", env_file=".env", env_ignore_empty=True, extra="ignore"
    )

    use_colors: bool = Field(
        default=True,
        description="Use colored output"
    )
    interactive: bool = Field(
        default=True,
        description="Ask for confirmation before committing"
    )
    confirm_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait for an answer to the confirmation prompt"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )


class Settings(BaseModel):
    """Main application settings."""

    lmstudio: ServerConfig = Field(default_factory=ServerConfig)
    commit: CommitSettings = Field(default_factory=CommitSettings)
    ui: UISettings = Field(default_factory=UISettings)

    @classmethod
    def from_file(cls, config_path: Path) -> "Settings":
        """Load settings from a JSON configuration file.

        Sections missing from the file fall back to the environment.
        """
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        try:
            with open(config_path) as f:
                config_data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}")

        if not isinstance(config_data, dict):
            raise ConfigurationError(
                f"Configuration file {config_path} must contain a JSON object"
            )

        sections = {
            "lmstudio": ServerConfig,
            "commit": CommitSettings,
            "ui": UISettings,
        }
        kwargs = {}
        for name, section_cls in sections.items():
            # Constructing through __init__ keeps env values for unset keys
            kwargs[name] = section_cls(**config_data.get(name, {}))
        return cls(**kwargs)

    def validate_required(self) -> None:
        """Ensure a model ID is configured before anything is started."""
        if not self.lmstudio.has_model:
            raise ConfigurationError(
                "LMSTUDIO_MODEL environment variable is not set. "
                "Set it to your model ID, e.g.: export LMSTUDIO_MODEL='your-model-id'"
            )

    @property
    def cache_dir(self) -> Path:
        """Get the cache directory."""
        if platform.system() == "Windows":
            base = Path(os.environ.get("LOCALAPPDATA", "~"))
        else:
            base = Path(os.environ.get("XDG_CACHE_HOME", "~/.cache"))

        return (base / "ai-commit").expanduser()

    @property
    def log_file(self) -> Path:
        """Get the log file path."""
        return self.cache_dir / "ai-commit.log"
