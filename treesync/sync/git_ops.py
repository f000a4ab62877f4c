"""
Git Operations — Typed wrappers around the git command line.

Every call builds an argument list and runs it through subprocess.run,
so no shell quoting is involved. Commands that the synchronizer cannot
proceed without raise GitCommandError; inspection helpers return None
instead.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

# Tracking states (HEAD vs upstream)
TRACK_UP_TO_DATE = "up-to-date"
TRACK_BEHIND = "behind"         # upstream has commits HEAD doesn't
TRACK_AHEAD = "ahead"           # HEAD has commits upstream doesn't
TRACK_DIVERGED = "diverged"     # neither is an ancestor of the other
TRACK_NO_UPSTREAM = "no-upstream"


class GitCommandError(Exception):
    """A git command exited non-zero."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = ""):
        # Keep positional args intact so the error pickles across processes
        super().__init__(list(command), returncode, stderr)
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr

    def __str__(self) -> str:
        detail = self.stderr.strip() or "no output"
        return f"git {' '.join(self.command)} failed (exit {self.returncode}): {detail}"


@dataclass(frozen=True)
class CloneOptions:
    """Optional flags for git clone."""

    depth: Optional[int] = None
    branch: Optional[str] = None

    def to_args(self) -> List[str]:
        args: List[str] = []
        if self.branch:
            args.extend(["--branch", self.branch])
        if self.depth:
            args.extend(["--depth", str(self.depth)])
        return args


def _git(*args: str, cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
    """Run a git command, optionally inside a repository."""
    cmd = ["git"] + list(args)
    logger.debug(f"$ {' '.join(cmd)}" + (f"  (in {cwd})" if cwd else ""))
    return subprocess.run(
        cmd,
        cwd=str(cwd) if cwd else None,
        capture_output=True,
        text=True,
    )


def _git_checked(*args: str, cwd: Optional[Path] = None) -> str:
    """Run a git command and return stripped stdout. Raises on failure."""
    result = _git(*args, cwd=cwd)
    if result.returncode != 0:
        raise GitCommandError(args, result.returncode, result.stderr or result.stdout)
    return result.stdout.strip()


def _git_output(*args: str, cwd: Optional[Path] = None) -> Optional[str]:
    """Run a git command and return stripped stdout, or None on failure."""
    result = _git(*args, cwd=cwd)
    if result.returncode != 0:
        return None
    return result.stdout.strip()


# ---------------------------------------------------------------------------
# Inspection
# ---------------------------------------------------------------------------

def is_checkout(path: Path) -> bool:
    """True if path holds a git working copy (.git dir, or .git file for worktrees)."""
    return (Path(path) / ".git").exists()


def get_remote_url(repo: Path, remote: str = "origin") -> Optional[str]:
    """URL configured for a remote, or None if the remote is missing."""
    return _git_output("remote", "get-url", remote, cwd=repo)


def branch_exists(repo: Path, name: str) -> bool:
    """True if a local branch with this name exists."""
    result = _git("rev-parse", "--verify", "--quiet", f"refs/heads/{name}", cwd=repo)
    return result.returncode == 0


def current_branch(repo: Path) -> Optional[str]:
    """Name of the checked-out branch, or None when HEAD is detached."""
    name = _git_output("rev-parse", "--abbrev-ref", "HEAD", cwd=repo)
    if not name or name == "HEAD":
        return None
    return name


def head_commit(repo: Path, short: bool = True) -> Optional[str]:
    if short:
        return _git_output("rev-parse", "--short", "HEAD", cwd=repo)
    return _git_output("rev-parse", "HEAD", cwd=repo)


def tracking_state(repo: Path) -> str:
    """
    Compare HEAD with its upstream branch using local refs only.

    Returns one of: 'up-to-date', 'behind', 'ahead', 'diverged', 'no-upstream'.
    """
    local = _git_output("rev-parse", "HEAD", cwd=repo)
    upstream = _git_output("rev-parse", "@{upstream}", cwd=repo)

    if not local or not upstream:
        return TRACK_NO_UPSTREAM

    if local == upstream:
        return TRACK_UP_TO_DATE

    # Is local an ancestor of upstream? → local is behind
    if _git("merge-base", "--is-ancestor", local, upstream, cwd=repo).returncode == 0:
        return TRACK_BEHIND

    # Is upstream an ancestor of local? → local is ahead
    if _git("merge-base", "--is-ancestor", upstream, local, cwd=repo).returncode == 0:
        return TRACK_AHEAD

    return TRACK_DIVERGED


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------

def clone(url: str, dest: Path, options: Optional[CloneOptions] = None) -> None:
    """Clone url into dest. The parent directory must already exist."""
    options = options or CloneOptions()
    _git_checked("clone", *options.to_args(), url, str(dest))


def fetch_all(repo: Path) -> None:
    """Fetch every remote, pruning deleted refs."""
    _git_checked("fetch", "--all", "--prune", cwd=repo)


def checkout(repo: Path, name: str) -> None:
    _git_checked("checkout", name, cwd=repo)


def create_tracking_branch(repo: Path, name: str, remote: str = "origin") -> None:
    """Create and check out a local branch tracking remote/name."""
    _git_checked("checkout", "-b", name, "--track", f"{remote}/{name}", cwd=repo)


def pull_ff_only(repo: Path) -> bool:
    """
    Fast-forward the current branch from its upstream.

    Returns False when git refuses the pull (divergent history, no
    upstream); the caller decides whether that is fatal.
    """
    result = _git("pull", "--ff-only", cwd=repo)
    if result.returncode != 0:
        logger.debug(f"pull --ff-only in {repo} failed: {result.stderr.strip()}")
        return False
    return True
