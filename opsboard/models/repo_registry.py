import uuid as uuid_pkg

from sqlalchemy import Column, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from opsboard.models.base import TimestampMixin, UUIDMixin


class RepoRegistryBase(SQLModel):
    """Base fields for a registry entry."""

    display_name: str | None = Field(default=None, max_length=255)
    server_path: str | None = Field(default=None, max_length=1000)
    pc_path: str | None = Field(default=None, max_length=1000)
    github_url: str | None = Field(default=None, max_length=500)
    is_active: bool = Field(default=True)
    is_ai_team: bool = Field(default=False)
    is_ignored: bool = Field(default=False)
    notes: str | None = Field(default=None)
    droplet_name: str | None = Field(default=None, max_length=100)
    pm2_name: str | None = Field(default=None, max_length=100, index=True)
    client_id: uuid_pkg.UUID | None = Field(default=None)
    project_id: uuid_pkg.UUID | None = Field(default=None)


class RepoRegistryCreate(SQLModel):
    """Schema for creating (or upserting) a registry entry."""

    repo_slug: str
    display_name: str | None = None
    aliases: list[str] | None = None
    server_path: str | None = None
    pc_path: str | None = None
    github_url: str | None = None
    is_ai_team: bool | None = None
    notes: str | None = None
    droplet_name: str | None = None
    pm2_name: str | None = None
    client_id: uuid_pkg.UUID | None = None
    project_id: uuid_pkg.UUID | None = None


class RepoRegistryUpdate(SQLModel):
    """Schema for updating a registry entry."""

    display_name: str | None = None
    aliases: list[str] | None = None
    server_path: str | None = None
    pc_path: str | None = None
    github_url: str | None = None
    is_active: bool | None = None
    is_ai_team: bool | None = None
    is_ignored: bool | None = None
    notes: str | None = None
    droplet_name: str | None = None
    pm2_name: str | None = None
    client_id: uuid_pkg.UUID | None = None
    project_id: uuid_pkg.UUID | None = None


class RepoRegistry(RepoRegistryBase, UUIDMixin, TimestampMixin, table=True):
    """Configured repository.

    ``id`` is the stable repository identifier; ``repo_slug`` is the
    human-assigned key and ``aliases`` lists the names reporters use for it.
    """

    __tablename__ = "repo_registry"
    __table_args__ = {"schema": "ops"}

    repo_slug: str = Field(max_length=255, unique=True, index=True)
    aliases: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSONB, nullable=False, server_default=text("'[]'::jsonb")),
    )
    auto_discovered: bool = Field(default=False)
