"""
Repository Synchronizer — Clone missing repositories, fast-forward existing ones.

For every manifest entry the destination is either:
- absent  → parent directories are created and the repository is cloned
- present → remote URL is checked, all remotes are fetched, the requested
            branch is checked out, and the branch is fast-forwarded

Only two problems are tolerated: a remote URL that differs from the
manifest, and a pull that cannot fast-forward. Both are logged as
warnings and recorded on the SyncResult. Any other git failure aborts
the run.
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..logging_config import setup_logging
from . import git_ops
from .config import RunConfig
from .manifest import ManifestEntry

logger = logging.getLogger(__name__)

ACTION_CLONED = "cloned"
ACTION_UPDATED = "updated"


@dataclass
class SyncResult:
    """Outcome of syncing one manifest entry."""

    path: str
    url: str
    action: str
    warnings: List[str] = field(default_factory=list)
    head: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.warnings


class RepoSynchronizer:
    """Brings every destination in a manifest up to date."""

    def __init__(
        self,
        config: RunConfig,
        log_level: Optional[str] = None,
        log_format: Optional[str] = None,
    ):
        self.config = config
        # Worker processes configure logging with the same settings
        self.log_level = log_level
        self.log_format = log_format

    # ------------------------------------------------------------------
    # Single entry
    # ------------------------------------------------------------------

    def sync_entry(self, entry: ManifestEntry) -> SyncResult:
        """Clone or update one repository. Raises on fatal git errors."""
        dest = self.config.destination(entry.path)

        if git_ops.is_checkout(dest):
            result = self._update(entry, dest)
        else:
            result = self._clone(entry, dest)

        result.head = git_ops.head_commit(dest)
        return result

    def _clone(self, entry: ManifestEntry, dest: Path) -> SyncResult:
        extra = {"repo": entry.path}
        logger.info(f"Cloning {entry.url} -> {entry.path}", extra=extra)

        dest.parent.mkdir(parents=True, exist_ok=True)
        git_ops.clone(entry.url, dest, self.config.clone_options)

        return SyncResult(path=entry.path, url=entry.url, action=ACTION_CLONED)

    def _update(self, entry: ManifestEntry, dest: Path) -> SyncResult:
        extra = {"repo": entry.path}
        result = SyncResult(path=entry.path, url=entry.url, action=ACTION_UPDATED)
        logger.info(f"Updating existing repo: {entry.path}", extra=extra)

        current_url = git_ops.get_remote_url(dest)
        if current_url != entry.url:
            message = (
                f"Remote URL mismatch in {entry.path} "
                f"(have: {current_url or '<none>'}, expected: {entry.url})"
            )
            logger.warning(message, extra=extra)
            result.warnings.append(message)

        git_ops.fetch_all(dest)

        branch = self.config.branch
        if branch:
            if git_ops.branch_exists(dest, branch):
                git_ops.checkout(dest, branch)
            else:
                logger.info(f"Creating local branch {branch} tracking origin/{branch}", extra=extra)
                git_ops.create_tracking_branch(dest, branch)

        if not git_ops.pull_ff_only(dest):
            message = f"Fast-forward failed in {entry.path}. Manual merge may be required."
            logger.warning(message, extra=extra)
            result.warnings.append(message)

        return result

    # ------------------------------------------------------------------
    # Whole manifest
    # ------------------------------------------------------------------

    def run(self, entries: Sequence[ManifestEntry]) -> List[SyncResult]:
        """
        Sync every entry and return results in manifest order.

        The first fatal error propagates. Sequentially, later entries are
        never touched; in parallel, queued entries are cancelled and
        in-flight ones finish before the error is re-raised.
        """
        entries = list(entries)
        config = self.config

        logger.info(f"Target root: {config.target_root}")
        if config.branch:
            logger.info(f"Requested branch: {config.branch}")
        if config.depth:
            logger.info(f"Shallow depth: {config.depth}")

        workers = min(config.max_workers, len(entries))
        # No pool for a single job
        if config.parallel and workers > 1:
            logger.info(f"Running in parallel mode ({workers} workers)")
            results = self._run_parallel(entries, workers)
        else:
            results = [self.sync_entry(entry) for entry in entries]

        logger.info("All operations completed.")
        return results

    def _run_parallel(self, entries: List[ManifestEntry], workers: int) -> List[SyncResult]:
        results: Dict[int, SyncResult] = {}

        with ProcessPoolExecutor(
            max_workers=workers,
            initializer=setup_logging,
            initargs=(self.log_level, self.log_format),
        ) as pool:
            futures = {
                pool.submit(_sync_in_worker, self.config, entry): index
                for index, entry in enumerate(entries)
            }
            try:
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
            except Exception:
                logger.error("Sync failed; waiting for in-flight repositories to finish")
                pool.shutdown(wait=True, cancel_futures=True)
                raise

        return [results[index] for index in range(len(entries))]


def _sync_in_worker(config: RunConfig, entry: ManifestEntry) -> SyncResult:
    """Pool task: sync one entry in a worker process."""
    return RepoSynchronizer(config).sync_entry(entry)
