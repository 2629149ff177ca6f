"""Fold reporter events into one server-anchored view per repository.

Each reporter's latest status event is kept (timestamp first, then the
event id). Snapshots are joined across reporters on a repository key: the
registry slug when the reporter-side name is known to the registry, the
reported name otherwise. Server reporters anchor the output; the pc
reporter only contributes ``pc_*`` fields to repositories a server reports.
"""

from collections.abc import Iterable, Mapping

from opsboard.services.git_state.drift import classify_drift
from opsboard.services.git_state.types import (
    DriftAssessment,
    MergedRepoView,
    Observation,
    RepoStatePair,
    ReporterEvent,
)


def latest_per_reporter(events: Iterable[ReporterEvent]) -> list[ReporterEvent]:
    """Keep the most recent event per service_id, ordered by service_id."""
    latest: dict[str, ReporterEvent] = {}
    for event in events:
        current = latest.get(event.service_id)
        if current is None or event.sort_key > current.sort_key:
            latest[event.service_id] = event
    return sorted(latest.values(), key=lambda e: e.service_id)


def repo_key(name: str, key_map: Mapping[str, str] | None = None) -> str:
    """Join key for a reported repository name."""
    if key_map:
        return key_map.get(name, name)
    return name


def collect_observations(
    events: Iterable[ReporterEvent],
    pc_service_id: str,
    key_map: Mapping[str, str] | None = None,
) -> tuple[dict[str, Observation], dict[str, Observation]]:
    """Split the latest snapshots into (server, pc) maps keyed by repo key.

    When several server reporters report the same repository the most recent
    observation is kept, so each key has at most one server observation.
    """
    server: dict[str, Observation] = {}
    pc: dict[str, Observation] = {}

    for event in latest_per_reporter(events):
        target = pc if event.service_id == pc_service_id else server
        for snapshot in event.snapshots:
            observation = Observation(
                snapshot=snapshot,
                service_id=event.service_id,
                timestamp=event.timestamp,
                seq=event.seq,
            )
            key = repo_key(snapshot.repo, key_map)
            current = target.get(key)
            if current is None or observation.sort_key > current.sort_key:
                target[key] = observation

    return server, pc


def _upstream_assessment(
    upstream_drift: Mapping[tuple[str, str], DriftAssessment] | None,
    view: MergedRepoView,
    key: str,
) -> DriftAssessment | None:
    if not upstream_drift:
        return None
    return upstream_drift.get((view.node_id, view.repo)) or upstream_drift.get(
        (view.node_id, key)
    )


def merge_repo_views(
    events: Iterable[ReporterEvent],
    pc_service_id: str,
    key_map: Mapping[str, str] | None = None,
    upstream_drift: Mapping[tuple[str, str], DriftAssessment] | None = None,
) -> list[MergedRepoView]:
    """Build the merged view for every repository a server reporter knows about.

    Drift comes from ``upstream_drift`` keyed by ``(node_id, repo)`` when the
    canonizer has assessed the repository; only unassessed repositories are
    classified here.
    """
    server, pc = collect_observations(events, pc_service_id, key_map)

    views: list[MergedRepoView] = []
    for key, observation in server.items():
        snapshot = observation.snapshot
        view = MergedRepoView(
            repo=snapshot.repo,
            repo_key=key,
            node_id=observation.service_id,
            branch=snapshot.branch,
            server_sha=snapshot.head,
            server_dirty=snapshot.dirty,
            ahead=snapshot.ahead,
            behind=snapshot.behind,
            last_seen=observation.timestamp,
            last_commit_msg=snapshot.last_commit_msg,
        )

        pc_observation = pc.get(key)
        pc_snapshot = pc_observation.snapshot if pc_observation else None
        if pc_snapshot is not None:
            view.pc_sha = pc_snapshot.head
            view.pc_dirty = pc_snapshot.dirty
            view.pc_branch = pc_snapshot.branch
            view.pc_ahead = pc_snapshot.ahead
            view.pc_behind = pc_snapshot.behind

        drift = _upstream_assessment(upstream_drift, view, key)
        if drift is None:
            drift = classify_drift(snapshot, pc_snapshot)
        view.drift_status = drift.status
        view.drift_reasons = list(drift.reasons)
        views.append(view)

    views.sort(key=lambda v: (v.node_id, v.repo))
    return views


def find_repo_state(
    events: Iterable[ReporterEvent],
    repo: str,
    pc_service_id: str,
    key_map: Mapping[str, str] | None = None,
) -> RepoStatePair:
    """Server and pc observation for a single repository."""
    key = repo_key(repo, key_map)
    server, pc = collect_observations(events, pc_service_id, key_map)
    return RepoStatePair(key=key, server=server.get(key), pc=pc.get(key))


def find_reporter(events: Iterable[ReporterEvent], service_id: str) -> ReporterEvent | None:
    """Latest event of one reporter, if it reported within the window."""
    for event in latest_per_reporter(events):
        if event.service_id == service_id:
            return event
    return None
