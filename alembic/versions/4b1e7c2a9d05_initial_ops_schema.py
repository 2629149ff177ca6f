"""initial_ops_schema

Revision ID: 4b1e7c2a9d05
Revises:
Create Date: 2026-10-19 10:12:41.308214

Creates the ops schema (reporter event log, canonical state, repo registry)
and the client bookkeeping tables.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4b1e7c2a9d05"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.execute("CREATE SCHEMA IF NOT EXISTS ops")

    op.create_table(
        "ops_events",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), nullable=False),
        sa.Column("service_id", sa.String(length=100), nullable=False),
        sa.Column("event_type", sa.String(length=50), nullable=False),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'{}'::jsonb"),
            nullable=False,
        ),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        schema="ops",
    )
    op.create_index("ix_ops_ops_events_service_id", "ops_events", ["service_id"], schema="ops")
    op.create_index("ix_ops_ops_events_event_type", "ops_events", ["event_type"], schema="ops")
    op.create_index("ix_ops_ops_events_timestamp", "ops_events", ["timestamp"], schema="ops")

    op.create_table(
        "canonical_state",
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("id", sa.String(length=255), nullable=False),
        sa.Column("node_id", sa.String(length=100), nullable=True),
        sa.Column("current_state", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("drift_status", sa.String(length=20), nullable=True),
        sa.Column("drift_reasons", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("node_sensor_last_seen", sa.DateTime(timezone=True), nullable=True),
        sa.Column("origin_tracker_last_seen", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("type", "id"),
        schema="ops",
    )
    op.create_index("ix_ops_canonical_state_node_id", "canonical_state", ["node_id"], schema="ops")

    op.create_table(
        "repo_registry",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("repo_slug", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column(
            "aliases",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.Column("server_path", sa.String(length=1000), nullable=True),
        sa.Column("pc_path", sa.String(length=1000), nullable=True),
        sa.Column("github_url", sa.String(length=500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_ai_team", sa.Boolean(), nullable=False),
        sa.Column("is_ignored", sa.Boolean(), nullable=False),
        sa.Column("auto_discovered", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("droplet_name", sa.String(length=100), nullable=True),
        sa.Column("pm2_name", sa.String(length=100), nullable=True),
        sa.Column("client_id", sa.Uuid(), nullable=True),
        sa.Column("project_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        schema="ops",
    )
    op.create_index("ix_ops_repo_registry_id", "repo_registry", ["id"], schema="ops")
    op.create_index(
        "ix_ops_repo_registry_repo_slug", "repo_registry", ["repo_slug"], unique=True, schema="ops"
    )
    op.create_index("ix_ops_repo_registry_pm2_name", "repo_registry", ["pm2_name"], schema="ops")

    op.create_table(
        "dev_clients",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_dev_clients_id", "dev_clients", ["id"])
    op.create_index("ix_dev_clients_slug", "dev_clients", ["slug"], unique=True)

    op.create_table(
        "dev_users",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("avatar_url", sa.String(length=500), nullable=True),
        sa.Column("role", sa.String(length=50), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_dev_users_id", "dev_users", ["id"])

    op.create_table(
        "dev_user_clients",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("client_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["dev_users.id"]),
        sa.ForeignKeyConstraint(["client_id"], ["dev_clients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "client_id", name="uq_dev_user_clients_user_client"),
    )
    op.create_index("ix_dev_user_clients_id", "dev_user_clients", ["id"])
    op.create_index("ix_dev_user_clients_user_id", "dev_user_clients", ["user_id"])
    op.create_index("ix_dev_user_clients_client_id", "dev_user_clients", ["client_id"])

    op.create_table(
        "dev_projects",
        sa.Column("id", sa.Uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("client_id", sa.Uuid(), nullable=True),
        sa.Column("parent_id", sa.Uuid(), nullable=True),
        sa.Column("is_parent", sa.Boolean(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=True),
        sa.Column("logo_url", sa.String(length=500), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["client_id"], ["dev_clients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_id"], ["dev_projects.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_dev_projects_id", "dev_projects", ["id"])
    op.create_index("ix_dev_projects_client_id", "dev_projects", ["client_id"])


def downgrade() -> None:
    op.drop_table("dev_projects")
    op.drop_table("dev_user_clients")
    op.drop_table("dev_users")
    op.drop_table("dev_clients")
    op.drop_table("repo_registry", schema="ops")
    op.drop_table("canonical_state", schema="ops")
    op.drop_table("ops_events", schema="ops")
