"""Git database API endpoint tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from opsboard.config import settings
from opsboard.domain.canonical_state_operations import canonical_state_ops
from opsboard.domain.event_operations import event_ops
from opsboard.domain.registry_operations import registry_ops
from opsboard.services.git.exceptions import GitCommandError
from opsboard.services.git.types import CommitAuthor, CommitRecord, CommitSummary
from opsboard.services.git_state.fingerprint import EMPTY_STATE_HASH
from opsboard.services.resolver import ResolveResult, repo_resolver

from tests.helpers.mock_factories import (
    make_mock_canonical_row,
    make_mock_event,
    make_mock_registry_entry,
    make_repo_entry,
)


@pytest.fixture
def no_events():
    with (
        patch.object(event_ops, "latest_per_service", AsyncMock(return_value=[])),
        patch.object(registry_ops, "get_key_map", AsyncMock(return_value={})),
        patch.object(canonical_state_ops, "list_by_types", AsyncMock(return_value=[])),
    ):
        yield


# ─────────────────────────────────────────────────────────────────────────────
# Status, fingerprint, history
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_repo_hash_for_unseen_repo(api_client: AsyncClient, no_events):
    """GET repo-hash for a repo nobody reported returns the empty-state hash."""
    resp = await api_client.get("/api/v1/git-database/repo-hash", params={"repo": "demo"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["state_hash"] == EMPTY_STATE_HASH
    assert data["has_server"] is False
    assert data["has_pc"] is False
    assert data["last_updated"] is None


@pytest.mark.asyncio
async def test_repo_hash_requires_repo(api_client: AsyncClient):
    resp = await api_client.get("/api/v1/git-database/repo-hash")
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "repo required"}


@pytest.mark.asyncio
async def test_repo_hash_is_stable(api_client: AsyncClient):
    rows = [make_mock_event("studio-dev", [make_repo_entry("demo")])]
    with (
        patch.object(event_ops, "latest_per_service", AsyncMock(return_value=rows)),
        patch.object(registry_ops, "get_key_map", AsyncMock(return_value={})),
    ):
        first = await api_client.get("/api/v1/git-database/repo-hash", params={"repo": "demo"})
        second = await api_client.get("/api/v1/git-database/repo-hash", params={"repo": "demo"})

    assert first.json()["state_hash"] == second.json()["state_hash"]
    assert first.json()["has_server"] is True


@pytest.mark.asyncio
async def test_status_repos_identical_across_calls(api_client: AsyncClient):
    rows = [
        make_mock_event("studio-dev", [make_repo_entry("demo"), make_repo_entry("api")]),
        make_mock_event("user-pc", [make_repo_entry("demo", dirty=True)]),
    ]
    with (
        patch.object(event_ops, "latest_per_service", AsyncMock(return_value=rows)),
        patch.object(registry_ops, "get_key_map", AsyncMock(return_value={})),
        patch.object(canonical_state_ops, "list_by_types", AsyncMock(return_value=[])),
    ):
        first = await api_client.get("/api/v1/git-database/status")
        second = await api_client.get("/api/v1/git-database/status")

    assert first.status_code == 200
    assert first.json()["repos"] == second.json()["repos"]
    assert [r["repo"] for r in first.json()["repos"]] == ["api", "demo"]
    assert "timestamp" in first.json()


@pytest.mark.asyncio
async def test_status_uses_canonical_drift_for_server_only_repo(api_client: AsyncClient):
    rows = [make_mock_event("studio-dev", [make_repo_entry("demo")])]
    canonical = [
        make_mock_canonical_row(drift_status="orange", drift_reasons=["server_behind"]),
    ]
    with (
        patch.object(event_ops, "latest_per_service", AsyncMock(return_value=rows)),
        patch.object(registry_ops, "get_key_map", AsyncMock(return_value={})),
        patch.object(canonical_state_ops, "list_by_types", AsyncMock(return_value=canonical)),
    ):
        resp = await api_client.get("/api/v1/git-database/status")

    assert resp.status_code == 200
    [repo] = resp.json()["repos"]
    assert repo["drift_status"] == "orange"
    assert repo["drift_reasons"] == ["server_behind"]
    assert resp.json()["summary"]["orange_count"] == 1


@pytest.mark.asyncio
async def test_status_database_failure_is_500(api_client: AsyncClient):
    with patch.object(
        event_ops, "latest_per_service", AsyncMock(side_effect=RuntimeError("pool exhausted"))
    ):
        resp = await api_client.get("/api/v1/git-database/status")

    assert resp.status_code == 500
    assert resp.json()["success"] is False
    assert "pool exhausted" in resp.json()["error"]


@pytest.mark.asyncio
async def test_history_requires_repo(api_client: AsyncClient):
    resp = await api_client.get("/api/v1/git-database/history")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_history(api_client: AsyncClient):
    rows = [make_mock_event("studio-dev", [make_repo_entry("demo")])]
    with patch.object(event_ops, "list_recent", AsyncMock(return_value=rows)):
        resp = await api_client.get("/api/v1/git-database/history", params={"repo": "demo"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["node"] == "studio-dev"
    assert len(data["history"]) == 1


# ─────────────────────────────────────────────────────────────────────────────
# Commit detail, log and working tree status
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_git_commit_rejects_bad_sha_without_subprocess(api_client: AsyncClient):
    spawn = AsyncMock()
    resolve = AsyncMock()
    with (
        patch("asyncio.create_subprocess_exec", spawn),
        patch.object(repo_resolver, "resolve_server_path", resolve),
    ):
        resp = await api_client.get(
            "/api/v1/git-database/git-commit", params={"repo": "demo", "sha": "HEAD; ls"}
        )

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid SHA format"
    spawn.assert_not_awaited()
    resolve.assert_not_awaited()


@pytest.mark.asyncio
async def test_git_commit_missing_params(api_client: AsyncClient):
    resp = await api_client.get("/api/v1/git-database/git-commit", params={"repo": "demo"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing repo or sha parameter"


@pytest.mark.asyncio
async def test_git_commit_rejects_path_outside_roots(api_client: AsyncClient, tmp_path, monkeypatch):
    repo = tmp_path / "elsewhere" / "demo"
    (repo / ".git").mkdir(parents=True)
    monkeypatch.setattr(settings, "allowed_repo_roots", [str(tmp_path / "www") + "/"])

    spawn = AsyncMock()
    with (
        patch("asyncio.create_subprocess_exec", spawn),
        patch.object(repo_resolver, "resolve_server_path", AsyncMock(return_value=str(repo))),
    ):
        resp = await api_client.get(
            "/api/v1/git-database/git-commit", params={"repo": "demo", "sha": "abc1234"}
        )

    assert resp.status_code == 403
    assert resp.json()["error"] == "Path outside allowed directories"
    spawn.assert_not_awaited()


@pytest.mark.asyncio
async def test_git_commit_success(api_client: AsyncClient, tmp_path, monkeypatch):
    root = tmp_path / "www"
    repo = root / "demo"
    (repo / ".git").mkdir(parents=True)
    monkeypatch.setattr(settings, "allowed_repo_roots", [str(root)])

    record = CommitRecord(
        sha="abc1234" + "0" * 33,
        sha_short="abc1234",
        subject="Add engine",
        body="",
        full_message="Add engine",
        author=CommitAuthor(name="Ada", email="ada@example.com"),
        date="2026-10-01 12:00:00 +0000",
        stat="",
    )
    with (
        patch.object(repo_resolver, "resolve_server_path", AsyncMock(return_value=str(repo))),
        patch(
            "opsboard.api.v1.git_database.get_commit_detail", AsyncMock(return_value=record)
        ) as detail,
    ):
        resp = await api_client.get(
            "/api/v1/git-database/git-commit", params={"repo": "demo", "sha": "abc1234"}
        )

    assert resp.status_code == 200
    commit = resp.json()["commit"]
    assert commit["sha_short"] == "abc1234"
    assert commit["author"] == {"name": "Ada", "email": "ada@example.com"}
    assert detail.await_args.args[0] == str(repo.resolve())


@pytest.mark.asyncio
async def test_git_commit_unknown_repo(api_client: AsyncClient):
    with (
        patch.object(registry_ops, "get_server_path", AsyncMock(return_value=None)),
        patch(
            "opsboard.services.resolver.canonical_state_ops.find_repo_path",
            AsyncMock(return_value=None),
        ),
    ):
        resp = await api_client.get(
            "/api/v1/git-database/git-commit", params={"repo": "ghost", "sha": "abc1234"}
        )

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_git_log(api_client: AsyncClient, tmp_path, monkeypatch):
    root = tmp_path / "www"
    repo = root / "demo"
    (repo / ".git").mkdir(parents=True)
    monkeypatch.setattr(settings, "allowed_repo_roots", [str(root)])

    commits = [CommitSummary(sha="a" * 40, sha_short="aaaaaaa", author="Ada", date="d", message="m")]
    with (
        patch.object(repo_resolver, "resolve_server_path", AsyncMock(return_value=str(repo))),
        patch("opsboard.api.v1.git_database.get_commit_log", AsyncMock(return_value=commits)),
    ):
        resp = await api_client.get(
            "/api/v1/git-database/git-log", params={"repo": "demo", "limit": 5}
        )

    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 1
    assert data["source"] == "server"
    assert data["commits"][0]["sha_short"] == "aaaaaaa"


@pytest.mark.asyncio
async def test_git_status_requires_repo(api_client: AsyncClient):
    resp = await api_client.get("/api/v1/git-database/git-status")
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Missing repo parameter"}


@pytest.mark.asyncio
async def test_git_status(api_client: AsyncClient, tmp_path, monkeypatch):
    root = tmp_path / "www"
    repo = root / "demo"
    (repo / ".git").mkdir(parents=True)
    monkeypatch.setattr(settings, "allowed_repo_roots", [str(root)])

    mock_git = AsyncMock(return_value=" M src/app.py\n?? notes.txt\n")
    with (
        patch.object(repo_resolver, "resolve_server_path", AsyncMock(return_value=str(repo))),
        patch("opsboard.services.git.status.run_git", mock_git),
    ):
        resp = await api_client.get("/api/v1/git-database/git-status", params={"repo": "demo"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["repo"] == "demo"
    assert data["path"] == str(repo.resolve())
    assert data["is_dirty"] is True
    assert data["file_count"] == 2
    assert data["files"] == [
        {"status": "M", "file": "src/app.py", "type": "modified"},
        {"status": "??", "file": "notes.txt", "type": "untracked"},
    ]
    assert mock_git.await_args.kwargs == {"timeout": settings.git_command_timeout}


@pytest.mark.asyncio
async def test_git_status_clean_tree(api_client: AsyncClient, tmp_path, monkeypatch):
    root = tmp_path / "www"
    repo = root / "demo"
    (repo / ".git").mkdir(parents=True)
    monkeypatch.setattr(settings, "allowed_repo_roots", [str(root)])

    with (
        patch.object(repo_resolver, "resolve_server_path", AsyncMock(return_value=str(repo))),
        patch("opsboard.services.git.status.run_git", AsyncMock(return_value="")),
    ):
        resp = await api_client.get("/api/v1/git-database/git-status", params={"repo": "demo"})

    assert resp.status_code == 200
    assert resp.json()["is_dirty"] is False
    assert resp.json()["files"] == []


@pytest.mark.asyncio
async def test_git_status_rejects_path_outside_roots(api_client: AsyncClient, tmp_path, monkeypatch):
    repo = tmp_path / "elsewhere" / "demo"
    (repo / ".git").mkdir(parents=True)
    monkeypatch.setattr(settings, "allowed_repo_roots", [str(tmp_path / "www") + "/"])

    spawn = AsyncMock()
    with (
        patch("asyncio.create_subprocess_exec", spawn),
        patch.object(repo_resolver, "resolve_server_path", AsyncMock(return_value=str(repo))),
    ):
        resp = await api_client.get("/api/v1/git-database/git-status", params={"repo": "demo"})

    assert resp.status_code == 403
    assert resp.json()["error"] == "Path outside allowed directories"
    spawn.assert_not_awaited()


@pytest.mark.asyncio
async def test_git_status_git_failure_is_500(api_client: AsyncClient, tmp_path, monkeypatch):
    root = tmp_path / "www"
    repo = root / "demo"
    (repo / ".git").mkdir(parents=True)
    monkeypatch.setattr(settings, "allowed_repo_roots", [str(root)])

    with (
        patch.object(repo_resolver, "resolve_server_path", AsyncMock(return_value=str(repo))),
        patch(
            "opsboard.services.git.status.run_git",
            AsyncMock(side_effect=GitCommandError("index.lock exists", returncode=128)),
        ),
    ):
        resp = await api_client.get("/api/v1/git-database/git-status", params={"repo": "demo"})

    assert resp.status_code == 500
    assert resp.json()["error"].startswith("Failed to get git status")


# ─────────────────────────────────────────────────────────────────────────────
# Resolver and registry
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_resolve(api_client: AsyncClient):
    result = ResolveResult(
        repo_slug="studio-chad",
        display_name="Chad",
        source="pm2_name",
        droplet="studio-dev",
        matched_pm2="chad-5401",
    )
    with patch.object(repo_resolver, "resolve_identifier", AsyncMock(return_value=result)):
        resp = await api_client.get("/api/v1/git-database/resolve", params={"id": "chad-5401"})

    assert resp.status_code == 200
    assert resp.json()["repo_slug"] == "studio-chad"
    assert resp.json()["matched_pm2"] == "chad-5401"


@pytest.mark.asyncio
async def test_resolve_ambiguous(api_client: AsyncClient):
    matches = [
        make_mock_registry_entry(repo_slug="a-dashboard"),
        make_mock_registry_entry(repo_slug="b-dashboard"),
    ]
    with (
        patch.object(registry_ops, "get_by_pm2_name", AsyncMock(return_value=None)),
        patch.object(registry_ops, "get_by_slug", AsyncMock(return_value=None)),
        patch.object(registry_ops, "find_by_slug_suffix", AsyncMock(return_value=matches)),
    ):
        resp = await api_client.get("/api/v1/git-database/resolve", params={"id": "dashboard"})

    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_registry_list(api_client: AsyncClient):
    entries = [make_mock_registry_entry(repo_slug="demo", aliases=["demo-server"])]
    with patch.object(registry_ops, "list_all", AsyncMock(return_value=entries)):
        resp = await api_client.get("/api/v1/git-database/registry")

    assert resp.status_code == 200
    [repo] = resp.json()["repos"]
    assert repo["repo_slug"] == "demo"
    assert repo["aliases"] == ["demo-server"]


@pytest.mark.asyncio
async def test_registry_upsert_requires_slug(api_client: AsyncClient):
    resp = await api_client.post("/api/v1/git-database/registry", json={"display_name": "Demo"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_registry_upsert(api_client: AsyncClient):
    entry = make_mock_registry_entry(repo_slug="demo")
    with patch.object(registry_ops, "upsert", AsyncMock(return_value=entry)) as upsert:
        resp = await api_client.post(
            "/api/v1/git-database/registry",
            json={"repo_slug": "demo", "server_path": "/var/www/demo"},
        )

    assert resp.status_code == 200
    assert upsert.await_args.args[1]["server_path"] == "/var/www/demo"


@pytest.mark.asyncio
async def test_registry_entry_not_found(api_client: AsyncClient):
    with patch.object(registry_ops, "get_by_slug", AsyncMock(return_value=None)):
        resp = await api_client.get("/api/v1/git-database/registry/ghost")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Repo not found"}


@pytest.mark.asyncio
async def test_registry_update_ignores_null_for_required_fields(api_client: AsyncClient):
    entry = make_mock_registry_entry()
    with (
        patch.object(registry_ops, "get_by_slug", AsyncMock(return_value=entry)),
        patch.object(registry_ops, "update", AsyncMock(return_value=entry)) as update,
    ):
        resp = await api_client.put(
            "/api/v1/git-database/registry/demo",
            json={"is_active": None, "notes": None, "pm2_name": "demo-3000"},
        )

    assert resp.status_code == 200
    assert update.await_args.args[2] == {"notes": None, "pm2_name": "demo-3000"}


@pytest.mark.asyncio
async def test_registry_delete_deactivates(api_client: AsyncClient):
    entry = make_mock_registry_entry()
    with (
        patch.object(registry_ops, "get_by_slug", AsyncMock(return_value=entry)),
        patch.object(registry_ops, "deactivate", AsyncMock(return_value=entry)) as deactivate,
    ):
        resp = await api_client.delete("/api/v1/git-database/registry/demo")

    assert resp.status_code == 200
    deactivate.assert_awaited_once()
