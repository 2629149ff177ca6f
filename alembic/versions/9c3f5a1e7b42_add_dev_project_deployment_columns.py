"""add_dev_project_deployment_columns

Revision ID: 9c3f5a1e7b42
Revises: 4b1e7c2a9d05
Create Date: 2026-10-19 16:40:03.512877

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "9c3f5a1e7b42"
down_revision: str | None = "4b1e7c2a9d05"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column("dev_projects", sa.Column("description", sa.Text(), nullable=True))
    op.add_column("dev_projects", sa.Column("server_path", sa.String(length=500), nullable=True))
    op.add_column("dev_projects", sa.Column("local_path", sa.String(length=500), nullable=True))
    op.add_column("dev_projects", sa.Column("git_repo", sa.String(length=500), nullable=True))
    op.add_column("dev_projects", sa.Column("droplet_name", sa.String(length=100), nullable=True))
    op.add_column("dev_projects", sa.Column("droplet_ip", sa.String(length=45), nullable=True))
    op.add_column("dev_projects", sa.Column("port_dev", sa.Integer(), nullable=True))
    op.add_column("dev_projects", sa.Column("port_test", sa.Integer(), nullable=True))
    op.add_column("dev_projects", sa.Column("port_prod", sa.Integer(), nullable=True))
    op.add_column("dev_projects", sa.Column("table_prefix", sa.String(length=50), nullable=True))
    op.create_index("ix_dev_projects_slug", "dev_projects", ["slug"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_dev_projects_slug", table_name="dev_projects")
    op.drop_column("dev_projects", "table_prefix")
    op.drop_column("dev_projects", "port_prod")
    op.drop_column("dev_projects", "port_test")
    op.drop_column("dev_projects", "port_dev")
    op.drop_column("dev_projects", "droplet_ip")
    op.drop_column("dev_projects", "droplet_name")
    op.drop_column("dev_projects", "git_repo")
    op.drop_column("dev_projects", "local_path")
    op.drop_column("dev_projects", "server_path")
    op.drop_column("dev_projects", "description")
