import uuid as uuid_pkg
from datetime import UTC, datetime

from sqlalchemy import DateTime, UniqueConstraint, text
from sqlmodel import Field, SQLModel

from opsboard.models.base import TimestampMixin, UUIDMixin


class DevClientCreate(SQLModel):
    """Schema for creating a client.

    Fields are optional here so that presence and slug format are checked by
    the domain layer, which reports them as 400s.
    """

    name: str | None = None
    slug: str | None = None
    description: str | None = None


class DevClient(UUIDMixin, TimestampMixin, table=True):
    """A client the studio builds projects for."""

    __tablename__ = "dev_clients"

    name: str = Field(max_length=255)
    slug: str = Field(max_length=100, unique=True, index=True)
    description: str | None = Field(default=None)
    active: bool = Field(default=True)


class DevUser(UUIDMixin, table=True):
    """A developer account."""

    __tablename__ = "dev_users"

    name: str | None = Field(default=None, max_length=255)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    email: str = Field(max_length=255, unique=True)
    avatar_url: str | None = Field(default=None, max_length=500)
    role: str | None = Field(default=None, max_length=50)


class DevAssignmentCreate(SQLModel):
    """Schema for assigning a developer to a client."""

    user_id: uuid_pkg.UUID | None = None
    role: str | None = None


class DevUserClient(UUIDMixin, table=True):
    """Assignment of a developer to a client."""

    __tablename__ = "dev_user_clients"
    __table_args__ = (UniqueConstraint("user_id", "client_id", name="uq_dev_user_clients_user_client"),)

    user_id: uuid_pkg.UUID = Field(foreign_key="dev_users.id", nullable=False, index=True)
    client_id: uuid_pkg.UUID = Field(
        foreign_key="dev_clients.id", nullable=False, index=True, ondelete="CASCADE"
    )
    role: str = Field(default="developer", max_length=50)
    created_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": text("now()")},
    )


class DevProjectCreate(SQLModel):
    """Schema for adding a project to a client.

    Name, slug and server_path are required. As with `DevClientCreate` they are
    optional here so the domain layer reports missing values as 400s.
    """

    name: str | None = None
    slug: str | None = None
    description: str | None = None
    server_path: str | None = None
    local_path: str | None = None
    git_repo: str | None = None
    droplet_name: str | None = None
    droplet_ip: str | None = None
    port_dev: int | None = None
    port_test: int | None = None
    port_prod: int | None = None
    table_prefix: str | None = None


class DevProject(UUIDMixin, table=True):
    """A project belonging to a client; children hang off a parent project."""

    __tablename__ = "dev_projects"

    client_id: uuid_pkg.UUID | None = Field(
        default=None, foreign_key="dev_clients.id", index=True, ondelete="CASCADE"
    )
    parent_id: uuid_pkg.UUID | None = Field(default=None, foreign_key="dev_projects.id")
    is_parent: bool = Field(default=False)
    name: str = Field(max_length=255)
    slug: str | None = Field(default=None, max_length=100, unique=True, index=True)
    description: str | None = Field(default=None)
    logo_url: str | None = Field(default=None, max_length=500)
    sort_order: int = Field(default=0)

    # Deployment
    server_path: str | None = Field(default=None, max_length=500)
    local_path: str | None = Field(default=None, max_length=500)
    git_repo: str | None = Field(default=None, max_length=500)
    droplet_name: str | None = Field(default=None, max_length=100)
    droplet_ip: str | None = Field(default=None, max_length=45)
    port_dev: int | None = Field(default=None)
    port_test: int | None = Field(default=None)
    port_prod: int | None = Field(default=None)
    table_prefix: str | None = Field(default=None, max_length=50)
