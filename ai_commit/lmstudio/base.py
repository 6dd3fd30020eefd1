"""
Shared types for the LM Studio lifecycle manager.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ServerState(str, Enum):
    """States the lifecycle manager moves through in one run."""

    UNCHECKED = "unchecked"
    CHECKING = "checking"
    RUNNING = "running"
    NOT_RUNNING = "not_running"
    LAUNCHING = "launching"
    POLLING = "polling"
    READY = "ready"
    TIMED_OUT = "timed_out"
    DISABLED = "disabled"
    LAUNCH_FAILED = "launch_failed"


class LaunchStatus(str, Enum):
    STARTED = "started"
    FAILED = "failed"


@dataclass(frozen=True)
class LaunchOutcome:
    """Result of a start attempt. STARTED does not mean the server is ready."""

    status: LaunchStatus
    method: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def started(cls, method: str) -> "LaunchOutcome":
        return cls(LaunchStatus.STARTED, method=method)

    @classmethod
    def failed(cls, reason: str, method: Optional[str] = None) -> "LaunchOutcome":
        return cls(LaunchStatus.FAILED, method=method, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status is LaunchStatus.STARTED


class LoadStatus(str, Enum):
    ALREADY_LOADED = "already_loaded"
    LOADED = "loaded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class LoadOutcome:
    """Result of the model-load stage."""

    status: LoadStatus
    model: str
    reason: Optional[str] = None


@dataclass(frozen=True)
class EnsureResult:
    """What `LMStudioManager.ensure_running` achieved."""

    state: ServerState
    load: Optional[LoadOutcome] = None

    @property
    def was_started(self) -> bool:
        return self.state is ServerState.READY


class LMStudioError(Exception):
    """Base exception for LM Studio lifecycle failures."""


class AutoStartDisabledError(LMStudioError):
    """Server is down and the start command disables auto-start."""


class ServerLaunchError(LMStudioError):
    """The server process could not be spawned."""


class ServerStartTimeoutError(LMStudioError):
    """The server did not become reachable before the deadline."""


class ModelLoadError(LMStudioError):
    """`lms load` exited with a non-zero status."""
