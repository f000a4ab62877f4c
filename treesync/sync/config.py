"""
Run Configuration — Resolve sync settings from arguments and environment.

Environment variables:
    PARALLEL=1        Sync repositories in a process pool
    GIT_DEPTH=N       Shallow-clone new repositories to N commits
    SYNC_JOBS=N       Cap the number of pool workers (default: CPU count)

Explicit arguments win over the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..validation import ConfigurationError, parse_flag, parse_positive_int
from .git_ops import CloneOptions

logger = logging.getLogger(__name__)

DEFAULT_JOBS = 4


@dataclass(frozen=True)
class RunConfig:
    """Settings for one sync run. Read-only once built."""

    target_root: Path = Path(".")
    branch: Optional[str] = None
    depth: Optional[int] = None
    parallel: bool = False
    jobs: Optional[int] = None

    def __post_init__(self) -> None:
        if self.depth is not None and self.depth < 1:
            raise ConfigurationError(f"depth must be a positive integer, got: {self.depth}")
        if self.jobs is not None and self.jobs < 1:
            raise ConfigurationError(f"jobs must be a positive integer, got: {self.jobs}")

    @property
    def max_workers(self) -> int:
        """Worker cap for parallel mode."""
        return self.jobs or os.cpu_count() or DEFAULT_JOBS

    @property
    def clone_options(self) -> CloneOptions:
        return CloneOptions(depth=self.depth, branch=self.branch)

    def destination(self, relative_path: str) -> Path:
        """Absolute-or-root-relative path of a manifest entry."""
        return Path(self.target_root) / relative_path

    @classmethod
    def from_env(
        cls,
        target_root: Path | str = ".",
        branch: Optional[str] = None,
        depth: Optional[int] = None,
        parallel: Optional[bool] = None,
        jobs: Optional[int] = None,
    ) -> "RunConfig":
        """
        Build a RunConfig, filling unset values from the environment.

        Raises:
            ConfigurationError: If GIT_DEPTH or SYNC_JOBS is not a positive integer
        """
        if depth is None:
            depth = parse_positive_int(os.environ.get("GIT_DEPTH"), "GIT_DEPTH")
        if parallel is None:
            parallel = parse_flag(os.environ.get("PARALLEL"))
        if jobs is None:
            jobs = parse_positive_int(os.environ.get("SYNC_JOBS"), "SYNC_JOBS")

        config = cls(
            target_root=Path(target_root or "."),
            branch=branch or None,
            depth=depth,
            parallel=parallel,
            jobs=jobs,
        )
        logger.debug(f"Run configuration: {config}")
        return config
