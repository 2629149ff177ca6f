"""Unit tests for RegistryOperations: all DB calls mocked."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.dialects import postgresql

from opsboard.domain.registry_operations import RegistryOperations

from tests.helpers.mock_factories import (
    make_mock_registry_entry,
    mock_scalar_result,
    mock_scalars_result,
)


def _sql(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect()))


class TestRegistryLookups:
    """Tests for slug, process-name and suffix lookups."""

    def setup_method(self):
        self.ops = RegistryOperations()
        self.db = AsyncMock()

    @pytest.mark.asyncio
    async def test_get_by_slug(self):
        entry = make_mock_registry_entry()
        self.db.execute = AsyncMock(return_value=mock_scalar_result(entry))

        assert await self.ops.get_by_slug(self.db, "demo") == entry

    @pytest.mark.asyncio
    async def test_get_by_pm2_name_scoped_to_droplet(self):
        self.db.execute = AsyncMock(return_value=mock_scalar_result(None))

        await self.ops.get_by_pm2_name(self.db, "chad-5401", "studio-dev")
        sql = _sql(self.db.execute.await_args.args[0])
        assert "pm2_name =" in sql
        assert "droplet_name =" in sql

    @pytest.mark.asyncio
    async def test_get_by_pm2_name_without_droplet(self):
        self.db.execute = AsyncMock(return_value=mock_scalar_result(None))

        await self.ops.get_by_pm2_name(self.db, "chad-5401")
        sql = _sql(self.db.execute.await_args.args[0])
        assert "droplet_name =" not in sql

    @pytest.mark.asyncio
    async def test_find_by_slug_suffix(self):
        entries = [make_mock_registry_entry(repo_slug="studio-dashboard")]
        self.db.execute = AsyncMock(return_value=mock_scalars_result(entries))

        assert await self.ops.find_by_slug_suffix(self.db, "dashboard") == entries
        assert "LIKE" in _sql(self.db.execute.await_args.args[0])


class TestGetKeyMap:
    """Tests for the reporter-name -> slug map."""

    def setup_method(self):
        self.ops = RegistryOperations()
        self.db = AsyncMock()

    @pytest.mark.asyncio
    async def test_maps_aliases_and_slugs(self):
        entries = [
            make_mock_registry_entry(repo_slug="demo", aliases=["demo-server", "Demo"]),
            make_mock_registry_entry(repo_slug="other", aliases=[]),
        ]
        with patch.object(self.ops, "list_active", AsyncMock(return_value=entries)):
            key_map = await self.ops.get_key_map(self.db)

        assert key_map == {
            "demo": "demo",
            "demo-server": "demo",
            "Demo": "demo",
            "other": "other",
        }

    @pytest.mark.asyncio
    async def test_slug_beats_another_entrys_alias(self):
        entries = [
            make_mock_registry_entry(repo_slug="alpha", aliases=["beta"]),
            make_mock_registry_entry(repo_slug="beta", aliases=[]),
        ]
        with patch.object(self.ops, "list_active", AsyncMock(return_value=entries)):
            key_map = await self.ops.get_key_map(self.db)

        assert key_map["beta"] == "beta"

    @pytest.mark.asyncio
    async def test_first_entry_keeps_shared_alias(self):
        entries = [
            make_mock_registry_entry(repo_slug="alpha", aliases=["app"]),
            make_mock_registry_entry(repo_slug="beta", aliases=["app"]),
        ]
        with patch.object(self.ops, "list_active", AsyncMock(return_value=entries)):
            key_map = await self.ops.get_key_map(self.db)

        assert key_map["app"] == "alpha"


class TestRegistryWrites:
    """Tests for upsert, update and soft delete."""

    def setup_method(self):
        self.ops = RegistryOperations()
        self.db = AsyncMock()
        self.db.add = MagicMock()

    @pytest.mark.asyncio
    async def test_upsert_uses_on_conflict_and_returns_row(self):
        entry = make_mock_registry_entry(repo_slug="demo")
        self.db.execute = AsyncMock(side_effect=[MagicMock(), mock_scalar_result(entry)])

        result = await self.ops.upsert(self.db, {"repo_slug": "demo", "display_name": None})

        assert result == entry
        sql = _sql(self.db.execute.await_args_list[0].args[0])
        assert "ON CONFLICT (repo_slug) DO UPDATE" in sql

    @pytest.mark.asyncio
    async def test_upsert_only_updates_provided_fields(self):
        entry = make_mock_registry_entry()
        self.db.execute = AsyncMock(side_effect=[MagicMock(), mock_scalar_result(entry)])

        await self.ops.upsert(
            self.db, {"repo_slug": "demo", "server_path": "/var/www/demo", "notes": None}
        )

        sql = _sql(self.db.execute.await_args_list[0].args[0])
        update_clause = sql.split("DO UPDATE SET", 1)[1]
        assert "server_path" in update_clause
        assert "notes" not in update_clause

    @pytest.mark.asyncio
    async def test_update_applies_none(self):
        entry = make_mock_registry_entry(notes="old")

        await self.ops.update(self.db, entry, {"notes": None})

        assert entry.notes is None
        self.db.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_deactivate(self):
        entry = make_mock_registry_entry(is_active=True)

        await self.ops.deactivate(self.db, entry)

        assert entry.is_active is False
