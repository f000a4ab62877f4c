"""
CLI sync commands — sync, status, and manifest listing.

Usage:
    python -m treesync.main sync [TARGET_ROOT] [BRANCH] [--parallel] [--depth N]
    python -m treesync.main status [TARGET_ROOT] [--json]
    python -m treesync.main manifest [--json]
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import click

logger = logging.getLogger(__name__)

manifest_option = click.option(
    "--manifest",
    "manifest_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML manifest to use instead of the built-in one",
)


def _load_manifest(manifest_file: Optional[Path]):
    from ..sync.manifest import default_manifest, load_manifest
    from ..validation import ValidationError

    if manifest_file is None:
        return default_manifest()
    try:
        return load_manifest(manifest_file)
    except ValidationError as e:
        raise click.ClickException(str(e))


@click.command("sync")
@click.argument("target_root", default=".", type=click.Path(file_okay=False, path_type=Path))
@click.argument("branch", required=False, default=None)
@manifest_option
@click.option("--depth", type=click.IntRange(min=1), default=None, help="Shallow-clone depth (overrides GIT_DEPTH)")
@click.option("--parallel/--sequential", default=None, help="Process pool or one at a time (overrides PARALLEL)")
@click.option("--jobs", "-j", type=click.IntRange(min=1), default=None, help="Max parallel workers (overrides SYNC_JOBS)")
@click.pass_context
def sync_cmd(
    ctx: click.Context,
    target_root: Path,
    branch: Optional[str],
    manifest_file: Optional[Path],
    depth: Optional[int],
    parallel: Optional[bool],
    jobs: Optional[int],
) -> None:
    """Clone missing repositories and fast-forward existing ones."""
    from concurrent.futures import BrokenExecutor

    from ..sync.config import RunConfig
    from ..sync.git_ops import GitCommandError
    from ..sync.synchronizer import ACTION_CLONED, RepoSynchronizer
    from ..validation import ConfigurationError

    manifest = _load_manifest(manifest_file)

    try:
        config = RunConfig.from_env(
            target_root=target_root,
            branch=branch,
            depth=depth,
            parallel=parallel,
            jobs=jobs,
        )
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    opts = ctx.obj or {}
    synchronizer = RepoSynchronizer(
        config,
        log_level=opts.get("log_level"),
        log_format=opts.get("log_format"),
    )

    try:
        results = synchronizer.run(manifest.repositories)
    except (GitCommandError, OSError, BrokenExecutor) as e:
        logger.error(f"Sync aborted: {e}")
        raise click.ClickException(str(e))

    click.echo()
    warned = 0
    for result in results:
        icon = "+" if result.action == ACTION_CLONED else "↻"
        line = f"  {icon} {result.path:35} {result.action:8} {result.head or ''}"
        if result.warnings:
            warned += 1
            click.secho(f"{line}  ({len(result.warnings)} warning(s))", fg="yellow")
        else:
            click.secho(line, fg="green")

    click.echo()
    summary = f"Synced {len(results)} repositories"
    if warned:
        summary += f", {warned} with warnings"
    click.secho(summary, bold=True)


@click.command("status")
@click.argument("target_root", default=".", type=click.Path(file_okay=False, path_type=Path))
@manifest_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def status_cmd(target_root: Path, manifest_file: Optional[Path], as_json: bool) -> None:
    """Show the state of each checkout without touching the network."""
    from ..sync.status import STATE_MISSING, STATE_PRESENT, inspect_all

    manifest = _load_manifest(manifest_file)
    statuses = inspect_all(target_root, manifest.repositories)

    if as_json:
        click.echo(json.dumps(
            {"target_root": str(target_root), "repositories": [s.to_dict() for s in statuses]},
            indent=2,
        ))
        return

    click.echo(f"\nTarget root: {target_root}\n")
    for status in statuses:
        if status.state == STATE_MISSING:
            click.secho(f"  ✗ {status.path}: missing", fg="red")
            continue
        if status.state != STATE_PRESENT:
            click.secho(f"  ⚠ {status.path}: directory exists but is not a git checkout", fg="yellow")
            continue

        line = f"  ✓ {status.path}: {status.branch or '(detached)'} @ {status.head} [{status.tracking}]"
        click.secho(line, fg="green" if status.url_matches else "yellow")
        if not status.url_matches:
            click.echo(f"      remote: {status.remote_url or '<none>'} (expected {status.url})")
    click.echo()


@click.command("manifest")
@manifest_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def manifest_cmd(manifest_file: Optional[Path], as_json: bool) -> None:
    """List the repositories in the manifest."""
    manifest = _load_manifest(manifest_file)

    if as_json:
        click.echo(json.dumps(manifest.model_dump(), indent=2))
        return

    for entry in manifest.repositories:
        click.echo(f"{entry.path:35} {entry.url}")
