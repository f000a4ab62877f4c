"""
Shared fixtures for sync tests.

Provides throwaway upstream repositories (a bare repo plus a working
clone used to push new commits) so the synchronizer can be exercised
against real git without touching the network.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

import pytest

from treesync.logging_config import HumanFormatter, JSONFormatter

GIT_IDENTITY = {
    "GIT_AUTHOR_NAME": "Tree Sync Tests",
    "GIT_AUTHOR_EMAIL": "tests@example.invalid",
    "GIT_COMMITTER_NAME": "Tree Sync Tests",
    "GIT_COMMITTER_EMAIL": "tests@example.invalid",
}


def run_git(*args: str, cwd: Path | None = None) -> str:
    """Run git for test setup and return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=str(cwd) if cwd else None,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


class UpstreamRepo:
    """A bare 'remote' repository and a scratch clone that pushes to it."""

    def __init__(self, base: Path, name: str):
        self.name = name
        self.bare = base / "remotes" / f"{name}.git"
        self.work = base / "authoring" / name
        self.bare.parent.mkdir(parents=True, exist_ok=True)
        self.work.parent.mkdir(parents=True, exist_ok=True)

        run_git("init", "--bare", "--quiet", str(self.bare))
        run_git("symbolic-ref", "HEAD", "refs/heads/main", cwd=self.bare)

        run_git("init", "--quiet", str(self.work))
        run_git("symbolic-ref", "HEAD", "refs/heads/main", cwd=self.work)
        run_git("remote", "add", "origin", str(self.bare), cwd=self.work)

    @property
    def url(self) -> str:
        # file:// so --depth is honoured for local clones
        return self.bare.as_uri()

    def commit(self, filename: str, content: str, branch: str = "main") -> str:
        """Commit a file on branch and push it. Returns the new commit hash."""
        current = run_git("symbolic-ref", "--short", "HEAD", cwd=self.work)
        if current != branch:
            existing = run_git("branch", "--list", branch, cwd=self.work)
            if existing:
                run_git("checkout", "--quiet", branch, cwd=self.work)
            else:
                run_git("checkout", "--quiet", "-b", branch, cwd=self.work)

        (self.work / filename).write_text(content, encoding="utf-8")
        run_git("add", filename, cwd=self.work)
        run_git("commit", "--quiet", "-m", f"update {filename}", cwd=self.work)
        run_git("push", "--quiet", "origin", f"{branch}:{branch}", cwd=self.work)
        return run_git("rev-parse", "HEAD", cwd=self.work)


@pytest.fixture
def git_identity(monkeypatch):
    """Commit identity for every git process spawned during the test."""
    for key, value in GIT_IDENTITY.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def make_upstream(tmp_path: Path, git_identity):
    """Factory for upstream repositories with one initial commit on main."""
    def _make(name: str = "repo") -> UpstreamRepo:
        repo = UpstreamRepo(tmp_path, name)
        repo.commit("README.md", f"# {name}\n")
        return repo

    return _make


@pytest.fixture
def target_root(tmp_path: Path) -> Path:
    """Empty directory the synchronizer writes into."""
    root = tmp_path / "tree"
    root.mkdir()
    return root


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Drop the console handlers setup_logging installs on the root logger."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, (HumanFormatter, JSONFormatter)):
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture(autouse=True)
def clean_sync_env(monkeypatch):
    """Keep the caller's sync settings out of the tests."""
    for key in ("PARALLEL", "GIT_DEPTH", "SYNC_JOBS", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def git():
    """The run_git helper, for assertions against real checkouts."""
    return run_git
