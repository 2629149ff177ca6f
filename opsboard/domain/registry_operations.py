"""Repository registry operations.

The registry maps human-assigned repo slugs to filesystem paths, process
names and the names reporters use for the repository.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from opsboard.models.repo_registry import RepoRegistry


class RegistryOperations:
    """CRUD and lookup operations for RepoRegistry."""

    def __init__(self) -> None:
        self.model = RepoRegistry

    async def list_all(self, db: AsyncSession) -> list[RepoRegistry]:
        statement = select(RepoRegistry).order_by(RepoRegistry.is_ai_team, RepoRegistry.repo_slug)
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def list_active(self, db: AsyncSession) -> list[RepoRegistry]:
        statement = (
            select(RepoRegistry)
            .where(RepoRegistry.is_active.is_(True))  # type: ignore[attr-defined]
            .order_by(RepoRegistry.repo_slug)
        )
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def get_by_slug(self, db: AsyncSession, slug: str) -> RepoRegistry | None:
        statement = (
            select(RepoRegistry)
            .where(RepoRegistry.repo_slug == slug)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_pm2_name(
        self,
        db: AsyncSession,
        pm2_name: str,
        droplet: str | None = None,
    ) -> RepoRegistry | None:
        """First entry whose process name matches, optionally scoped to a droplet."""
        statement = select(RepoRegistry).where(RepoRegistry.pm2_name == pm2_name)
        if droplet:
            statement = statement.where(RepoRegistry.droplet_name == droplet)
        result = await db.execute(statement.order_by(RepoRegistry.repo_slug).limit(1))
        return result.scalar_one_or_none()

    async def find_by_slug_suffix(self, db: AsyncSession, suffix: str) -> list[RepoRegistry]:
        """Entries whose slug ends with ``suffix``."""
        statement = (
            select(RepoRegistry)
            .where(RepoRegistry.repo_slug.endswith(suffix, autoescape=True))  # type: ignore[attr-defined]
            .order_by(RepoRegistry.repo_slug)
        )
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def get_server_path(self, db: AsyncSession, slug: str) -> str | None:
        statement = select(RepoRegistry.server_path).where(RepoRegistry.repo_slug == slug)
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_key_map(self, db: AsyncSession) -> dict[str, str]:
        """Map every known reporter-side name (slug or alias) to its repo slug."""
        key_map: dict[str, str] = {}
        for entry in await self.list_active(db):
            for alias in entry.aliases or []:
                key_map.setdefault(alias, entry.repo_slug)
            # A slug always maps to itself, even if another entry lists it as an alias
            key_map[entry.repo_slug] = entry.repo_slug
        return key_map

    async def upsert(self, db: AsyncSession, obj_in: dict[str, Any]) -> RepoRegistry:
        """Create an entry, or update it when the slug already exists.

        Fields that are missing or None keep their stored value.
        """
        now = datetime.now(UTC)
        provided = {k: v for k, v in obj_in.items() if v is not None and k != "repo_slug"}

        values = {
            "is_active": True,
            "is_ai_team": False,
            "is_ignored": False,
            "auto_discovered": False,
            "aliases": [],
            **provided,
            "repo_slug": obj_in["repo_slug"],
            "created_at": now,
            "updated_at": now,
        }
        statement = (
            insert(self.model)
            .values(**values)
            .on_conflict_do_update(
                index_elements=["repo_slug"],
                set_={**provided, "updated_at": now},
            )
        )
        await db.execute(statement)
        await db.flush()

        entry = await self.get_by_slug(db, obj_in["repo_slug"])
        if entry is None:
            raise RuntimeError(f"Registry upsert for {obj_in['repo_slug']} returned no row")
        return entry

    async def update(
        self,
        db: AsyncSession,
        db_obj: RepoRegistry,
        obj_in: dict[str, Any],
    ) -> RepoRegistry:
        """Apply all keys in obj_in, including None (clears the field)."""
        for field, value in obj_in.items():
            setattr(db_obj, field, value)
        db_obj.updated_at = datetime.now(UTC)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def deactivate(self, db: AsyncSession, db_obj: RepoRegistry) -> RepoRegistry:
        """Soft delete: keep the row, stop treating it as active."""
        return await self.update(db, db_obj, {"is_active": False})


registry_ops = RegistryOperations()
