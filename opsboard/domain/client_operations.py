"""Client bookkeeping operations.

Clients and their projects carry a human-assigned slug. Slug format and
required fields are checked here before any statement is sent; slug
uniqueness is left to the database constraint and reported as a conflict.
"""

import re
import uuid as uuid_pkg

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from opsboard.core.database import is_unique_violation
from opsboard.core.exceptions import ConflictError, NotFoundError, ValidationError
from opsboard.models.client import (
    DevClient,
    DevClientCreate,
    DevProject,
    DevProjectCreate,
    DevUser,
    DevUserClient,
)

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")

# Projects shown on a client card
CARD_PROJECT_LIMIT = 8


def validate_client_input(data: DevClientCreate) -> None:
    """Reject a new client before it reaches the database."""
    if not data.name or not data.slug:
        raise ValidationError("Name and slug are required")
    if not SLUG_PATTERN.fullmatch(data.slug):
        raise ValidationError("Slug must be lowercase alphanumeric with hyphens only")


def validate_project_input(data: DevProjectCreate) -> None:
    """Reject a new project before it reaches the database."""
    if not data.name or not data.slug or not data.server_path:
        raise ValidationError("Name, slug, and server_path are required")
    if not SLUG_PATTERN.fullmatch(data.slug):
        raise ValidationError("Slug must be lowercase alphanumeric with hyphens only")


class ClientOperations:
    """CRUD operations for DevClient plus its team and project lookups."""

    def __init__(self) -> None:
        self.model = DevClient

    async def get(self, db: AsyncSession, id: uuid_pkg.UUID) -> DevClient | None:
        statement = select(DevClient).where(DevClient.id == id)
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def list_all(self, db: AsyncSession) -> list[DevClient]:
        statement = select(DevClient).order_by(DevClient.created_at.desc())  # type: ignore[attr-defined]
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def get_team(
        self,
        db: AsyncSession,
        client_id: uuid_pkg.UUID,
    ) -> list[tuple[DevUser, str]]:
        """Developers assigned to a client, with their role on it."""
        statement = (
            select(DevUser, DevUserClient.role)
            .join(DevUserClient, DevUserClient.user_id == DevUser.id)
            .where(DevUserClient.client_id == client_id)
            .order_by(DevUser.first_name, DevUser.last_name)
        )
        result = await db.execute(statement)
        return [(row[0], row[1]) for row in result.all()]

    async def get_assignments(
        self,
        db: AsyncSession,
        client_id: uuid_pkg.UUID,
    ) -> list[tuple[DevUserClient, DevUser]]:
        """Assignment rows for a client joined with the assigned user."""
        statement = (
            select(DevUserClient, DevUser)
            .join(DevUser, DevUserClient.user_id == DevUser.id)
            .where(DevUserClient.client_id == client_id)
            .order_by(DevUser.first_name, DevUser.last_name)
        )
        result = await db.execute(statement)
        return [(row[0], row[1]) for row in result.all()]

    async def get_top_projects(
        self,
        db: AsyncSession,
        client_id: uuid_pkg.UUID,
        limit: int = CARD_PROJECT_LIMIT,
    ) -> list[DevProject]:
        """Top-level projects only (no children)."""
        statement = (
            select(DevProject)
            .where(
                DevProject.client_id == client_id,
                or_(DevProject.parent_id.is_(None), DevProject.is_parent.is_(True)),  # type: ignore[union-attr,attr-defined]
            )
            .order_by(DevProject.sort_order, DevProject.name)
            .limit(limit)
        )
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def get_projects(self, db: AsyncSession, client_id: uuid_pkg.UUID) -> list[DevProject]:
        statement = (
            select(DevProject)
            .where(DevProject.client_id == client_id)
            .order_by(DevProject.sort_order, DevProject.name)
        )
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def create(self, db: AsyncSession, data: DevClientCreate) -> DevClient:
        """Create a client; a taken slug raises ConflictError."""
        validate_client_input(data)

        db_obj = DevClient(
            name=data.name,
            slug=data.slug,
            description=data.description or None,
            active=True,
        )
        db.add(db_obj)
        try:
            await db.flush()
        except IntegrityError as e:
            if is_unique_violation(e):
                raise ConflictError("A client with this slug already exists") from e
            raise
        await db.refresh(db_obj)
        return db_obj

    async def create_project(
        self,
        db: AsyncSession,
        client_id: uuid_pkg.UUID,
        data: DevProjectCreate,
    ) -> DevProject:
        """Add a project to a client; a taken slug raises ConflictError."""
        validate_project_input(data)

        if await self.get(db, client_id) is None:
            raise NotFoundError("Client")

        db_obj = DevProject(
            client_id=client_id,
            name=data.name,
            slug=data.slug,
            description=data.description or None,
            server_path=data.server_path,
            local_path=data.local_path or None,
            git_repo=data.git_repo or None,
            droplet_name=data.droplet_name or None,
            droplet_ip=data.droplet_ip or None,
            port_dev=data.port_dev or None,
            port_test=data.port_test or None,
            port_prod=data.port_prod or None,
            table_prefix=data.table_prefix or None,
        )
        db.add(db_obj)
        try:
            await db.flush()
        except IntegrityError as e:
            if is_unique_violation(e):
                raise ConflictError("A project with this slug already exists") from e
            raise
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, id: uuid_pkg.UUID) -> bool:
        db_obj = await self.get(db, id)
        if db_obj:
            await db.delete(db_obj)
            await db.flush()
            return True
        return False


client_ops = ClientOperations()
