"""Repo-state reconciliation service.

Loads the reporters' latest status events, folds them through the reducer
and shapes the payloads served by the git-database endpoints. Everything is
computed per request; nothing is cached between calls.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from opsboard.config import settings
from opsboard.domain.canonical_state_operations import canonical_state_ops
from opsboard.domain.event_operations import event_ops
from opsboard.domain.registry_operations import registry_ops
from opsboard.models.canonical_state import CanonicalState
from opsboard.models.ops_event import (
    GIT_COMMIT,
    PC_GIT_COMMIT,
    PC_GIT_STATUS,
    REPO_HISTORY_EVENT_TYPES,
    REPO_STATUS_EVENT_TYPES,
    OpsEvent,
)
from opsboard.services.git_state.fingerprint import compute_state_hash
from opsboard.services.git_state.reducer import (
    find_repo_state,
    find_reporter,
    latest_per_reporter,
    merge_repo_views,
)
from opsboard.services.git_state.types import (
    DriftAssessment,
    DriftStatus,
    RepoSnapshot,
    ReporterEvent,
)

logger = logging.getLogger(__name__)

HISTORY_SCAN_LIMIT = 500


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def upstream_drift_map(rows: list[CanonicalState]) -> dict[tuple[str, str], DriftAssessment]:
    """Canonizer drift per (node_id, repo) for repo rows with a recognised status."""
    assessments: dict[tuple[str, str], DriftAssessment] = {}
    for row in rows:
        if row.type != "repo" or not row.node_id or not row.drift_status:
            continue
        try:
            status = DriftStatus(row.drift_status)
        except ValueError:
            logger.warning(f"Ignoring unknown drift status {row.drift_status!r} on {row.id}")
            continue
        state = row.current_state or {}
        repo = state.get("repo") or row.id.split(":")[-1]
        assessments[(row.node_id, repo)] = DriftAssessment(
            status=status,
            reasons=tuple(row.drift_reasons or ()),
        )
    return assessments


def to_reporter_event(row: OpsEvent) -> ReporterEvent:
    """Convert an event row into the reducer's input shape."""
    metadata = row.event_metadata or {}
    entries = metadata.get("repos") or []
    snapshots = tuple(
        snapshot
        for snapshot in (RepoSnapshot.from_metadata(entry) for entry in entries)
        if snapshot is not None
    )
    return ReporterEvent(
        service_id=row.service_id,
        timestamp=row.timestamp,
        seq=row.id or 0,
        snapshots=snapshots,
    )


class GitStateService:
    """Builds status, fingerprint, node and history views of repo state."""

    def __init__(
        self,
        pc_service_id: str | None = None,
        window_days: int | None = None,
        hash_length: int | None = None,
    ):
        self._pc_service_id = pc_service_id
        self._window_days = window_days
        self._hash_length = hash_length

    @property
    def pc_service_id(self) -> str:
        return self._pc_service_id or settings.pc_service_id

    @property
    def window_days(self) -> int:
        return self._window_days or settings.repo_event_window_days

    @property
    def hash_length(self) -> int:
        return self._hash_length or settings.state_hash_length

    async def load_reporter_events(self, db: AsyncSession) -> list[ReporterEvent]:
        """Latest status event per reporter within the observation window."""
        since = datetime.now(UTC) - timedelta(days=self.window_days)
        rows = await event_ops.latest_per_service(db, REPO_STATUS_EVENT_TYPES, since)
        return [to_reporter_event(row) for row in rows]

    async def get_status(self, db: AsyncSession) -> dict[str, Any]:
        """Merged server/pc view of every repository plus a drift summary."""
        events = await self.load_reporter_events(db)
        key_map = await registry_ops.get_key_map(db)
        canonical_rows = await canonical_state_ops.list_by_types(db, ("repo",))

        views = merge_repo_views(
            events,
            self.pc_service_id,
            key_map,
            upstream_drift_map(canonical_rows),
        )
        repos = [view.to_dict() for view in views]

        pc_event = find_reporter(events, self.pc_service_id)
        pc_repos = []
        if pc_event is not None:
            pc_repos = [
                {
                    "repo": s.repo,
                    "branch": s.branch,
                    "pc_sha": s.head,
                    "pc_dirty": s.dirty,
                    "ahead": s.ahead,
                    "behind": s.behind,
                }
                for s in pc_event.snapshots
            ]

        server_events = [
            e for e in latest_per_reporter(events) if e.service_id != self.pc_service_id
        ]
        server_last_seen = max((e.timestamp for e in server_events), default=None)

        summary = {
            "total_repos": len(views),
            "green_count": sum(1 for v in views if v.drift_status == DriftStatus.GREEN),
            "orange_count": sum(1 for v in views if v.drift_status == DriftStatus.ORANGE),
            "red_count": sum(1 for v in views if v.drift_status == DriftStatus.RED),
            "gray_count": sum(1 for v in views if v.drift_status == DriftStatus.GRAY),
            "pc_repos_count": len(pc_repos),
            "nodes": sorted({v.node_id for v in views}),
        }

        return {
            "repos": repos,
            "pc_repos": pc_repos,
            "summary": summary,
            "last_seen": {
                "server": _iso(server_last_seen),
                "pc": _iso(pc_event.timestamp) if pc_event else None,
            },
        }

    async def get_repo_hash(self, db: AsyncSession, repo: str) -> dict[str, Any]:
        """Polling fingerprint for one repository."""
        events = await self.load_reporter_events(db)
        key_map = await registry_ops.get_key_map(db)

        pair = find_repo_state(events, repo, self.pc_service_id, key_map)
        state_hash = compute_state_hash(pair.server, pair.pc, self.hash_length)

        return {
            "repo_slug": repo,
            "state_hash": state_hash,
            "last_updated": _iso(pair.last_updated),
            "has_server": pair.server is not None,
            "has_pc": pair.pc is not None,
            "server_last_seen": _iso(pair.server.timestamp) if pair.server else None,
            "pc_last_seen": _iso(pair.pc.timestamp) if pair.pc else None,
        }

    async def get_node_view(self, db: AsyncSession) -> dict[str, Any]:
        """Canonical node/repo state grouped per node, with registry overrides.

        Drift values here are the canonizer's, passed through unchanged.
        """
        rows = await canonical_state_ops.list_by_types(db, ("node", "repo"))
        configs = {entry.repo_slug: entry for entry in await registry_ops.list_active(db)}
        pc_row = await event_ops.latest_for_service(db, self.pc_service_id, PC_GIT_STATUS)

        nodes: dict[str, dict[str, Any]] = {}
        for row in rows:
            if row.type == "node" and row.node_id:
                nodes[row.node_id] = {
                    "id": row.id,
                    "node_id": row.node_id,
                    "drift_status": row.drift_status or DriftStatus.GRAY.value,
                    "drift_reasons": row.drift_reasons or [],
                    "repos": [],
                    "last_report": _iso(row.updated_at),
                }

        for row in rows:
            if row.type != "repo":
                continue
            node = nodes.get(row.node_id or "")
            if node is None:
                continue
            state = row.current_state or {}
            slug = state.get("repo") or row.id.split(":")[-1]
            config = configs.get(slug)
            node["repos"].append(
                {
                    "id": row.id,
                    "repo": slug,
                    "node_id": row.node_id,
                    "branch": state.get("branch") or "unknown",
                    "local_sha": state.get("local_sha") or state.get("head") or "",
                    "origin_sha": state.get("origin_sha"),
                    "is_dirty": bool(state.get("is_dirty") or state.get("dirty")),
                    "ahead": state.get("ahead") or 0,
                    "behind": state.get("behind") or 0,
                    "drift_status": row.drift_status or DriftStatus.GRAY.value,
                    "drift_reasons": row.drift_reasons or [],
                    "last_seen": _iso(row.node_sensor_last_seen or row.updated_at),
                    "last_commit_msg": state.get("last_commit_msg"),
                    "display_name": config.display_name if config else None,
                    "path": (config.server_path if config else None) or state.get("path"),
                    "github_url": (config.github_url if config else None)
                    or state.get("github_url"),
                    "is_ai_team": config.is_ai_team if config else False,
                    "pm2_name": config.pm2_name if config else None,
                    "droplet_name": config.droplet_name if config else None,
                    "notes": config.notes if config else None,
                }
            )

        pc_state = None
        if pc_row is not None:
            pc_event = to_reporter_event(pc_row)
            pc_repos = []
            for s in pc_event.snapshots:
                config = configs.get(s.repo)
                pc_repos.append(
                    {
                        "repo": s.repo,
                        "branch": s.branch,
                        "head": s.head,
                        "dirty": s.dirty,
                        "ahead": s.ahead,
                        "behind": s.behind,
                        "last_seen": _iso(pc_event.timestamp),
                        "last_commit_msg": s.last_commit_msg,
                        "display_name": config.display_name if config else None,
                        "path": (config.pc_path if config else None) or s.path,
                        "is_ai_team": config.is_ai_team if config else False,
                    }
                )
            pc_state = {"node_id": self.pc_service_id, "repos": pc_repos}

        return {"nodes": list(nodes.values()), "pc": pc_state}

    async def get_history(
        self,
        db: AsyncSession,
        repo: str,
        node: str,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Commit and snapshot history of one repository, newest first.

        Repeated reports of the same head on the same node collapse into
        the newest one.
        """
        rows = await event_ops.list_recent(db, REPO_HISTORY_EVENT_TYPES, HISTORY_SCAN_LIMIT)

        entries: list[dict[str, Any]] = []
        for row in rows:
            metadata = row.event_metadata or {}
            if row.event_type in (GIT_COMMIT, PC_GIT_COMMIT):
                if metadata.get("repo") != repo:
                    continue
                default_node = self.pc_service_id if row.event_type == PC_GIT_COMMIT else node
                entries.append(
                    {
                        "id": row.id,
                        "type": "commit",
                        "timestamp": _iso(row.timestamp),
                        "node": metadata.get("node_id") or default_node,
                        "old_head": metadata.get("old_head"),
                        "new_head": metadata.get("new_head"),
                        "branch": metadata.get("branch"),
                        "message": metadata.get("commit_message") or metadata.get("last_commit_msg"),
                    }
                )
                continue

            event = to_reporter_event(row)
            snapshot = next((s for s in event.snapshots if s.repo == repo), None)
            if snapshot is None:
                continue
            entries.append(
                {
                    "id": row.id,
                    "type": "snapshot",
                    "timestamp": _iso(row.timestamp),
                    "node": row.service_id,
                    "head": snapshot.head,
                    "branch": snapshot.branch,
                    "dirty": snapshot.dirty,
                    "message": snapshot.last_commit_msg,
                }
            )

        seen: set[tuple[str, str | None]] = set()
        unique: list[dict[str, Any]] = []
        for entry in entries:
            key = (entry["node"], entry.get("new_head") or entry.get("head"))
            if key in seen:
                continue
            seen.add(key)
            unique.append(entry)

        return unique[:limit]


git_state_service = GitStateService()
