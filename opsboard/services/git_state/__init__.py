"""Repo-state reconciliation across the server sensor and the pc agent."""

from opsboard.services.git_state.drift import classify_drift, humanize_reason
from opsboard.services.git_state.fingerprint import EMPTY_STATE_HASH, compute_state_hash
from opsboard.services.git_state.reducer import (
    find_repo_state,
    latest_per_reporter,
    merge_repo_views,
)
from opsboard.services.git_state.service import GitStateService, git_state_service
from opsboard.services.git_state.types import (
    DriftAssessment,
    DriftStatus,
    MergedRepoView,
    Observation,
    RepoSnapshot,
    RepoStatePair,
    ReporterEvent,
)

__all__ = [
    "classify_drift",
    "humanize_reason",
    "compute_state_hash",
    "EMPTY_STATE_HASH",
    "find_repo_state",
    "latest_per_reporter",
    "merge_repo_views",
    "GitStateService",
    "git_state_service",
    "DriftAssessment",
    "DriftStatus",
    "MergedRepoView",
    "Observation",
    "RepoSnapshot",
    "RepoStatePair",
    "ReporterEvent",
]
