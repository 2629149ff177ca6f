"""Git database endpoints.

Repo drift status and polling fingerprints come from the reporters' event
log. Commit detail, log and working tree status shell out to git inside the
registered server working tree. The registry maps slugs to paths and process
names.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException, Query, status

from opsboard.api.deps import DbSession
from opsboard.config import settings
from opsboard.core.exceptions import NotFoundError, ValidationError
from opsboard.domain import registry_ops
from opsboard.models.repo_registry import (
    RepoRegistry,
    RepoRegistryCreate,
    RepoRegistryUpdate,
)
from opsboard.services.git import (
    check_repo_path,
    get_commit_detail,
    get_commit_log,
    get_working_tree_status,
    validate_sha,
)
from opsboard.services.git_state import git_state_service
from opsboard.services.resolver import repo_resolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/git-database", tags=["git-database"])

# Registry fields a null in PUT leaves untouched
NON_CLEARABLE_FIELDS = ("display_name", "aliases", "is_active", "is_ai_team", "is_ignored")


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _serialize_registry(r: RepoRegistry) -> dict:
    return {
        "id": str(r.id),
        "repo_slug": r.repo_slug,
        "display_name": r.display_name,
        "aliases": list(r.aliases or []),
        "server_path": r.server_path,
        "pc_path": r.pc_path,
        "github_url": r.github_url,
        "is_active": r.is_active,
        "is_ai_team": r.is_ai_team,
        "is_ignored": r.is_ignored,
        "auto_discovered": r.auto_discovered,
        "notes": r.notes,
        "droplet_name": r.droplet_name,
        "pm2_name": r.pm2_name,
        "client_id": str(r.client_id) if r.client_id else None,
        "project_id": str(r.project_id) if r.project_id else None,
        "created_at": r.created_at.isoformat(),
        "updated_at": r.updated_at.isoformat(),
    }


def _internal_error(message: str, e: Exception) -> HTTPException:
    logger.error(f"{message}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"{message}: {e}",
    )


@router.get("/status")
async def get_status(db: DbSession):
    """Merged server/pc state of every repository with drift classification."""
    try:
        payload = await git_state_service.get_status(db)
    except Exception as e:
        raise _internal_error("Git database status failed", e) from e

    return {"success": True, **payload, "timestamp": _now_iso()}


@router.get("/drift")
async def get_drift(db: DbSession):
    """Canonical state grouped per node, with registry overrides applied."""
    try:
        payload = await git_state_service.get_node_view(db)
    except Exception as e:
        raise _internal_error("Git drift view failed", e) from e

    return {"success": True, **payload, "timestamp": _now_iso()}


@router.get("/repo-hash")
async def get_repo_hash(
    db: DbSession,
    repo: str | None = Query(None, description="Repository name"),
):
    """Short fingerprint of a repository's merged state, for cheap polling."""
    if not repo:
        raise ValidationError("repo required")

    try:
        payload = await git_state_service.get_repo_hash(db, repo)
    except Exception as e:
        raise _internal_error("Repo hash failed", e) from e

    return {"success": True, **payload}


@router.get("/git-commit")
async def get_git_commit(
    db: DbSession,
    repo: str | None = Query(None, description="Repository slug"),
    sha: str | None = Query(None, description="Commit sha (6-40 hex chars)"),
):
    """Full detail of one commit in the repository's server working tree."""
    if not repo or not sha:
        raise ValidationError("Missing repo or sha parameter")
    validate_sha(sha)

    try:
        path = await repo_resolver.resolve_server_path(db, repo)
        repo_path = check_repo_path(path, settings.allowed_repo_roots)
        commit = await get_commit_detail(str(repo_path), sha, settings.git_command_timeout)
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error("Failed to get commit details", e) from e

    return {"success": True, "commit": commit.to_dict()}


@router.get("/git-log")
async def get_git_log(
    db: DbSession,
    repo: str | None = Query(None, description="Repository slug"),
    limit: int = Query(50, ge=1, le=500),
):
    """Recent commits of the repository's server working tree."""
    if not repo:
        raise ValidationError("Missing repo parameter")

    try:
        path = await repo_resolver.resolve_server_path(db, repo)
        repo_path = check_repo_path(path, settings.allowed_repo_roots)
        commits = await get_commit_log(str(repo_path), limit, settings.git_log_timeout)
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error("Git command failed", e) from e

    return {
        "success": True,
        "repo": repo,
        "path": str(repo_path),
        "source": "server",
        "commits": [c.to_dict() for c in commits],
        "count": len(commits),
    }


@router.get("/git-status")
async def get_git_status(
    db: DbSession,
    repo: str | None = Query(None, description="Repository slug"),
):
    """Uncommitted and untracked files in the repository's server working tree."""
    if not repo:
        raise ValidationError("Missing repo parameter")

    try:
        path = await repo_resolver.resolve_server_path(db, repo)
        repo_path = check_repo_path(path, settings.allowed_repo_roots)
        files = await get_working_tree_status(str(repo_path), settings.git_command_timeout)
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error("Failed to get git status", e) from e

    return {
        "success": True,
        "repo": repo,
        "path": str(repo_path),
        "is_dirty": bool(files),
        "file_count": len(files),
        "files": [f.to_dict() for f in files],
    }


@router.get("/history")
async def get_history(
    db: DbSession,
    repo: str | None = Query(None, description="Repository name"),
    node: str = Query("studio-dev", description="Node assumed for commits that omit one"),
    limit: int = Query(50, ge=1, le=500),
):
    """Commit and snapshot history of a repository from the event log."""
    if not repo:
        raise ValidationError("repo parameter required")

    try:
        history = await git_state_service.get_history(db, repo, node, limit)
    except Exception as e:
        raise _internal_error("Git history failed", e) from e

    return {
        "success": True,
        "repo": repo,
        "node": node,
        "history": history,
        "timestamp": _now_iso(),
    }


@router.get("/resolve")
async def resolve_repo(
    db: DbSession,
    id: str | None = Query(None, description="Process name, slug, or short name"),
    droplet: str | None = Query(None),
):
    """Resolve a loose identifier to a registry slug."""
    if not id:
        raise ValidationError("Missing id parameter")

    try:
        result = await repo_resolver.resolve_identifier(db, id, droplet)
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error("Resolve failed", e) from e

    response = {
        "success": True,
        "repo_slug": result.repo_slug,
        "display_name": result.display_name,
        "source": result.source,
        "droplet": result.droplet,
    }
    if result.matched_pm2:
        response["matched_pm2"] = result.matched_pm2
    return response


@router.get("/registry")
async def list_registry(db: DbSession):
    """All registry entries, AI team repos last."""
    entries = await registry_ops.list_all(db)
    return {"success": True, "repos": [_serialize_registry(r) for r in entries]}


@router.post("/registry")
async def upsert_registry(data: RepoRegistryCreate, db: DbSession):
    """Create a registry entry or fill in an existing one."""
    if not data.repo_slug:
        raise ValidationError("repo_slug is required")

    entry = await registry_ops.upsert(db, data.model_dump())
    logger.info(f"Registry entry saved: {entry.repo_slug}")
    return {"success": True, "repo": _serialize_registry(entry)}


@router.get("/registry/{slug}")
async def get_registry_entry(slug: str, db: DbSession):
    entry = await registry_ops.get_by_slug(db, slug)
    if entry is None:
        raise NotFoundError("Repo")
    return {"success": True, "repo": _serialize_registry(entry)}


@router.put("/registry/{slug}")
async def update_registry_entry(slug: str, data: RepoRegistryUpdate, db: DbSession):
    """Update an entry. Fields sent as null are cleared; omitted fields are kept."""
    entry = await registry_ops.get_by_slug(db, slug)
    if entry is None:
        raise NotFoundError("Repo")

    updates = data.model_dump(exclude_unset=True)
    for field in NON_CLEARABLE_FIELDS:
        if field in updates and updates[field] is None:
            del updates[field]

    entry = await registry_ops.update(db, entry, updates)
    return {"success": True, "repo": _serialize_registry(entry)}


@router.delete("/registry/{slug}")
async def deactivate_registry_entry(slug: str, db: DbSession):
    """Soft delete: the entry is kept but marked inactive."""
    entry = await registry_ops.get_by_slug(db, slug)
    if entry is None:
        raise NotFoundError("Repo")

    await registry_ops.deactivate(db, entry)
    return {"success": True, "message": "Repo deactivated"}
