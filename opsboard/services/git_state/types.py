"""Types for repo-state reconciliation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class DriftStatus(StrEnum):
    GREEN = "green"
    ORANGE = "orange"
    RED = "red"  # reserved for production-critical drift
    GRAY = "gray"


def _as_int(value: Any) -> int:
    try:
        return max(int(value or 0), 0)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class RepoSnapshot:
    """One repository as seen by one reporter."""

    repo: str
    branch: str | None = None
    head: str | None = None
    dirty: bool = False
    ahead: int = 0
    behind: int = 0
    path: str | None = None
    last_commit_msg: str | None = None

    @classmethod
    def from_metadata(cls, entry: dict[str, Any]) -> RepoSnapshot | None:
        """Build a snapshot from one ``metadata.repos`` entry.

        Accepts the older sensor field names (``local_sha``, ``is_dirty``).
        Entries without a repo name are dropped.
        """
        if not isinstance(entry, dict):
            return None
        name = entry.get("repo")
        if not name:
            return None
        return cls(
            repo=str(name),
            branch=entry.get("branch"),
            head=entry.get("head") or entry.get("local_sha"),
            dirty=bool(entry.get("dirty", entry.get("is_dirty", False))),
            ahead=_as_int(entry.get("ahead")),
            behind=_as_int(entry.get("behind")),
            path=entry.get("path"),
            last_commit_msg=entry.get("last_commit_msg"),
        )

    def state(self) -> dict[str, Any]:
        """Observed git state, the part of a snapshot that drift and hashing look at."""
        return {
            "repo": self.repo,
            "branch": self.branch,
            "head": self.head,
            "dirty": self.dirty,
            "ahead": self.ahead,
            "behind": self.behind,
        }


@dataclass(frozen=True)
class ReporterEvent:
    """The latest status report of one reporter."""

    service_id: str
    timestamp: datetime
    seq: int
    snapshots: tuple[RepoSnapshot, ...] = ()

    @property
    def sort_key(self) -> tuple[datetime, int]:
        return (self.timestamp, self.seq)


@dataclass(frozen=True)
class Observation:
    """A snapshot together with the report it came from."""

    snapshot: RepoSnapshot
    service_id: str
    timestamp: datetime
    seq: int

    @property
    def sort_key(self) -> tuple[datetime, int, str]:
        return (self.timestamp, self.seq, self.service_id)


@dataclass(frozen=True)
class DriftAssessment:
    status: DriftStatus
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class RepoStatePair:
    """Server and pc observation of one repository (either may be missing)."""

    key: str
    server: Observation | None = None
    pc: Observation | None = None

    @property
    def last_updated(self) -> datetime | None:
        stamps = [o.timestamp for o in (self.server, self.pc) if o is not None]
        return max(stamps) if stamps else None


@dataclass
class MergedRepoView:
    """Server-anchored view of one repository with the pc side folded in."""

    repo: str
    repo_key: str
    node_id: str
    branch: str | None
    server_sha: str | None
    server_dirty: bool
    ahead: int
    behind: int
    last_seen: datetime
    drift_status: DriftStatus = DriftStatus.GRAY
    drift_reasons: list[str] = field(default_factory=list)
    last_commit_msg: str | None = None
    pc_sha: str | None = None
    pc_dirty: bool | None = None
    pc_branch: str | None = None
    pc_ahead: int | None = None
    pc_behind: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["drift_status"] = self.drift_status.value
        data["last_seen"] = self.last_seen.isoformat()
        return data
