"""
Tests for Git repository access against real temporary repositories.
"""

import pytest
from git import Repo

from ai_commit.git_ops.repository import GitRepository, GitRepositoryError


@pytest.fixture
def repo(tmp_path):
    repo = Repo.init(tmp_path / "project")
    with repo.config_writer() as config:
        config.set_value("user", "name", "Test User")
        config.set_value("user", "email", "test@example.com")
        config.set_value("commit", "gpgsign", "false")
    return repo


def write(repo: Repo, name: str, content: str) -> None:
    path = repo.working_tree_dir + "/" + name
    with open(path, "w") as f:
        f.write(content)


class TestGitRepository:
    def test_not_a_repository(self, tmp_path):
        with pytest.raises(GitRepositoryError, match="Not in a git repository"):
            GitRepository(tmp_path)

    def test_empty_staged_diff(self, repo):
        write(repo, "app.py", "print('hello')\n")

        assert GitRepository(repo.working_tree_dir).get_staged_diff() == ""

    def test_staged_diff_and_files(self, repo):
        write(repo, "app.py", "print('hello')\n")
        repo.index.add(["app.py"])

        git_repo = GitRepository(repo.working_tree_dir)

        assert "+print('hello')" in git_repo.get_staged_diff()
        assert git_repo.get_staged_files() == [("A", "app.py")]

    def test_commit(self, repo):
        write(repo, "app.py", "print('hello')\n")
        repo.index.add(["app.py"])

        commit_hash = GitRepository(repo.working_tree_dir).commit("feat: add app")

        assert repo.head.commit.hexsha == commit_hash
        assert repo.head.commit.message.strip() == "feat: add app"

    def test_commit_without_staged_changes(self, repo):
        with pytest.raises(GitRepositoryError, match="git commit failed"):
            GitRepository(repo.working_tree_dir).commit("chore: nothing")
