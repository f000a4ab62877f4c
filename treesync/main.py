"""
treesync — CLI Entry Point

Usage:
    python -m treesync.main sync [TARGET_ROOT] [BRANCH]
    python -m treesync.main status [TARGET_ROOT]
    python -m treesync.main manifest

Examples:
    treesync sync .                      # default branch of every repo
    treesync sync ~/android13 thirteen   # check out 'thirteen' everywhere
    PARALLEL=1 GIT_DEPTH=1 treesync sync ~/android13
"""

from __future__ import annotations

# Load .env FIRST, before anything reads env vars
from pathlib import Path
from dotenv import load_dotenv

_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

from typing import Optional

import click

from . import __version__
from .cli.sync import manifest_cmd, status_cmd, sync_cmd
from .logging_config import setup_logging


@click.group()
@click.version_option(__version__, prog_name="treesync")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level (default: LOG_LEVEL or INFO)",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default=None,
    help="Log output format (default: LOG_FORMAT or text)",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], log_format: Optional[str]) -> None:
    """treesync — Clone or fast-forward the repositories of a device tree."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["log_format"] = log_format
    setup_logging(log_level, log_format)


cli.add_command(sync_cmd)
cli.add_command(status_cmd)
cli.add_command(manifest_cmd)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
