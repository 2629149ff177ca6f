"""Drift classification between the server and pc view of a repository."""

from opsboard.services.git_state.types import DriftAssessment, DriftStatus, RepoSnapshot

REASON_LABELS: dict[str, str] = {
    "server_dirty": "Server has uncommitted changes",
    "pc_dirty": "PC has uncommitted changes",
    "sha_mismatch": "Commits differ",
    "server_ahead": "Server is ahead of origin",
    "server_behind": "Server is behind origin",
    "diverged": "Branches have diverged",
    "missing_data": "No data available",
    "dirty": "Uncommitted changes",
}


def classify_drift(
    server: RepoSnapshot | None,
    pc: RepoSnapshot | None,
) -> DriftAssessment:
    """Classify drift from the two observations of one repository.

    Rules:
    - either side missing: gray / missing_data
    - dirty working trees add server_dirty / pc_dirty
    - differing heads add diverged, server_ahead, server_behind or sha_mismatch
      depending on the server's position relative to origin
    - no reasons is green, any reason is orange (red is reserved)
    """
    if server is None or pc is None:
        return DriftAssessment(status=DriftStatus.GRAY, reasons=("missing_data",))

    reasons: list[str] = []
    if server.dirty:
        reasons.append("server_dirty")
    if pc.dirty:
        reasons.append("pc_dirty")

    if server.head != pc.head:
        if server.ahead > 0 and server.behind > 0:
            reasons.append("diverged")
        elif server.ahead > 0:
            reasons.append("server_ahead")
        elif server.behind > 0:
            reasons.append("server_behind")
        else:
            reasons.append("sha_mismatch")

    if not reasons:
        return DriftAssessment(status=DriftStatus.GREEN)
    return DriftAssessment(status=DriftStatus.ORANGE, reasons=tuple(reasons))


def humanize_reason(reason: str) -> str:
    """Human-readable label for a drift reason code."""
    return REASON_LABELS.get(reason, reason)
