"""
ai-commit - commit message suggestions from a local LM Studio model.

Reads the staged changes, makes sure the LM Studio server is running with
the configured model loaded, and proposes a one-line commit message.
"""

__version__ = "1.0.0"

from ai_commit.core import AICommit, AICommitError
from ai_commit.config.settings import Settings, ServerConfig

__all__ = ["AICommit", "AICommitError", "Settings", "ServerConfig"]
