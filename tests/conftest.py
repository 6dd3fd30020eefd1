"""
Shared pytest fixtures.
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

from ai_commit.config.settings import ServerConfig
from ai_commit.lmstudio.cli_tool import CommandResult, LMSCli


SAMPLE_DIFF = """diff --git a/app.py b/app.py
index 3b18e51..a9c4f2d 100644
--- a/app.py
+++ b/app.py
@@ -1,3 +1,4 @@
 def main():
-    print("hello")
+    name = input("Name: ")
+    print(f"hello {name}")
"""

ENV_PREFIXES = ("LMSTUDIO_", "COMMIT_", "AI_COMMIT_")


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Run every test with default settings and no stray .env file."""
    for name in list(os.environ):
        if name.startswith(ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def server_config():
    return ServerConfig(
        model="qwen2.5-coder-7b-instruct",
        base_url="http://localhost:1234/v1",
        startup_timeout=0.3,
        poll_interval=0.05,
    )


@pytest.fixture
def console():
    """Console double; MagicMock so spinners work as context managers."""
    return MagicMock()


@pytest.fixture
def fake_cli():
    """LMSCli double with every subcommand succeeding."""
    cli = MagicMock(spec=LMSCli)
    cli.is_available = AsyncMock(return_value=True)
    cli.server_status = AsyncMock(return_value=True)
    cli.start_server = AsyncMock(return_value=True)
    cli.list_loaded = AsyncMock(return_value="")
    cli.load = AsyncMock(return_value=CommandResult(0, "Model loaded", ""))
    return cli


@pytest.fixture
def sample_diff():
    return SAMPLE_DIFF
