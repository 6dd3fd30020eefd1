"""
Git repository operations using GitPython.
"""

from pathlib import Path
from typing import List, Optional, Tuple
from git import Repo, InvalidGitRepositoryError, NoSuchPathError, GitCommandError
from loguru import logger


class GitRepository:
    """Staged-diff and commit access to a Git working tree."""

    def __init__(self, repo_path: Optional[Path] = None):
        """Initialize Git repository."""
        self.repo_path = repo_path or Path.cwd()
        self.repo: Optional[Repo] = None
        self._initialize_repo()

    def _initialize_repo(self) -> None:
        """Initialize the Git repository object."""
        try:
            self.repo = Repo(self.repo_path, search_parent_directories=True)
            logger.debug(f"Initialized Git repository at {self.repo.working_dir}")
        except (InvalidGitRepositoryError, NoSuchPathError):
            raise GitRepositoryError(f"Not in a git repository: {self.repo_path}")

    def get_staged_diff(self) -> str:
        """Return `git diff --cached`, stripped."""
        try:
            return self.repo.git.diff("--cached").strip()
        except GitCommandError as e:
            raise GitRepositoryError(f"Failed to get git diff: {e}")

    def get_staged_files(self) -> List[Tuple[str, str]]:
        """Staged files as (status letter, path) pairs."""
        try:
            output = self.repo.git.diff("--cached", "--name-status")
        except GitCommandError as e:
            raise GitRepositoryError(f"Failed to list staged files: {e}")

        files = []
        for line in output.splitlines():
            parts = line.split("\t")
            if len(parts) >= 2:
                # Renames and copies list old and new path; show the new one
                files.append((parts[0], parts[-1]))
        return files

    def commit(self, message: str) -> str:
        """Run `git commit -m <message>` so hooks apply, and return the new HEAD."""
        try:
            self.repo.git.commit("-m", message)
        except GitCommandError as e:
            raise GitRepositoryError(f"git commit failed with exit code {e.status}: {e.stderr.strip()}")

        commit_hash = self.repo.head.commit.hexsha
        logger.info(f"Created commit {commit_hash[:8]}: {message}")
        return commit_hash


class GitRepositoryError(Exception):
    """Custom exception for Git repository operations."""
