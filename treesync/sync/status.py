"""
Checkout Status — Read-only report on each manifest destination.

Uses local refs only; nothing is fetched, so "behind" means behind the
last fetched state of the upstream branch.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from . import git_ops
from .manifest import ManifestEntry

STATE_MISSING = "missing"
STATE_NOT_A_CHECKOUT = "not-a-checkout"   # directory exists without .git
STATE_PRESENT = "present"


@dataclass
class CheckoutStatus:
    """Status of one manifest destination."""

    path: str
    url: str
    state: str
    remote_url: Optional[str] = None
    branch: Optional[str] = None
    head: Optional[str] = None
    tracking: Optional[str] = None

    @property
    def url_matches(self) -> bool:
        return self.remote_url == self.url

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["url_matches"] = self.url_matches if self.state == STATE_PRESENT else None
        return data


def inspect_checkout(root: Path, entry: ManifestEntry) -> CheckoutStatus:
    dest = Path(root) / entry.path

    if not dest.exists():
        return CheckoutStatus(path=entry.path, url=entry.url, state=STATE_MISSING)

    if not git_ops.is_checkout(dest):
        return CheckoutStatus(path=entry.path, url=entry.url, state=STATE_NOT_A_CHECKOUT)

    return CheckoutStatus(
        path=entry.path,
        url=entry.url,
        state=STATE_PRESENT,
        remote_url=git_ops.get_remote_url(dest),
        branch=git_ops.current_branch(dest),
        head=git_ops.head_commit(dest),
        tracking=git_ops.tracking_state(dest),
    )


def inspect_all(root: Path, entries: Sequence[ManifestEntry]) -> List[CheckoutStatus]:
    """Status for every manifest entry, in manifest order."""
    return [inspect_checkout(root, entry) for entry in entries]
