"""Client and developer-assignment endpoints."""

import logging
import uuid as uuid_pkg

from fastapi import APIRouter, Query, status

from opsboard.api.deps import DbSession
from opsboard.core.exceptions import NotFoundError, ValidationError
from opsboard.domain import client_ops, dev_assignment_ops
from opsboard.models.client import (
    DevAssignmentCreate,
    DevClient,
    DevClientCreate,
    DevProject,
    DevProjectCreate,
    DevUser,
    DevUserClient,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["clients"])


def _serialize_client(c: DevClient) -> dict:
    return {
        "id": str(c.id),
        "name": c.name,
        "slug": c.slug,
        "description": c.description,
        "active": c.active,
        "created_at": c.created_at.isoformat(),
        "updated_at": c.updated_at.isoformat(),
    }


def _serialize_project(p: DevProject) -> dict:
    return {
        "id": str(p.id),
        "name": p.name,
        "slug": p.slug,
        "logo_url": p.logo_url,
        "parent_id": str(p.parent_id) if p.parent_id else None,
        "is_parent": p.is_parent,
        "sort_order": p.sort_order,
    }


def _serialize_project_detail(p: DevProject) -> dict:
    return {
        **_serialize_project(p),
        "client_id": str(p.client_id) if p.client_id else None,
        "description": p.description,
        "server_path": p.server_path,
        "local_path": p.local_path,
        "git_repo": p.git_repo,
        "droplet_name": p.droplet_name,
        "droplet_ip": p.droplet_ip,
        "port_dev": p.port_dev,
        "port_test": p.port_test,
        "port_prod": p.port_prod,
        "table_prefix": p.table_prefix,
    }


def _serialize_team_member(user: DevUser, role: str) -> dict:
    return {
        "id": str(user.id),
        "name": user.name,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "avatar_url": user.avatar_url,
        "role": role,
    }


def _serialize_assignment(assignment: DevUserClient, user: DevUser | None = None) -> dict:
    data = {
        "assignment_id": str(assignment.id),
        "client_id": str(assignment.client_id),
        "user_id": str(assignment.user_id),
        "role": assignment.role,
        "assigned_at": assignment.created_at.isoformat(),
    }
    if user is not None:
        data.update(
            {
                "email": user.email,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "user_role": user.role,
            }
        )
    return data


@router.get("")
async def list_clients(db: DbSession):
    """All clients, newest first, with their team and top-level projects."""
    clients = await client_ops.list_all(db)

    results = []
    for client in clients:
        team = await client_ops.get_team(db, client.id)
        projects = await client_ops.get_top_projects(db, client.id)
        results.append(
            {
                **_serialize_client(client),
                "team": [_serialize_team_member(user, role) for user, role in team],
                "projects": [_serialize_project(p) for p in projects],
            }
        )

    return {"success": True, "clients": results}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_client(data: DevClientCreate, db: DbSession):
    """Create a client. The slug must be lowercase letters, digits and hyphens."""
    client = await client_ops.create(db, data)
    logger.info(f"Client created: {client.slug}")
    return {"success": True, "client": _serialize_client(client)}


@router.get("/{client_id}")
async def get_client(client_id: uuid_pkg.UUID, db: DbSession):
    """A client with all its projects and assigned developers."""
    client = await client_ops.get(db, client_id)
    if client is None:
        raise NotFoundError("Client")

    projects = await client_ops.get_projects(db, client_id)
    assignments = await client_ops.get_assignments(db, client_id)

    return {
        "success": True,
        "client": {
            **_serialize_client(client),
            "projects": [_serialize_project(p) for p in projects],
            "assignedDevs": [_serialize_assignment(a, u) for a, u in assignments],
        },
    }


@router.delete("/{client_id}")
async def delete_client(client_id: uuid_pkg.UUID, db: DbSession):
    deleted = await client_ops.delete(db, client_id)
    if not deleted:
        raise NotFoundError("Client")
    return {"success": True}


@router.post("/{client_id}/projects", status_code=status.HTTP_201_CREATED)
async def create_project(client_id: uuid_pkg.UUID, data: DevProjectCreate, db: DbSession):
    """Add a project to a client. Name, slug and server_path are required."""
    project = await client_ops.create_project(db, client_id, data)
    logger.info(f"Project created for client {client_id}: {project.slug}")
    return {"success": True, "project": _serialize_project_detail(project)}


@router.post("/{client_id}/devs", status_code=status.HTTP_201_CREATED)
async def assign_dev(client_id: uuid_pkg.UUID, data: DevAssignmentCreate, db: DbSession):
    """Assign a developer to a client (role defaults to developer)."""
    if data.user_id is None:
        raise ValidationError("user_id is required")

    client = await client_ops.get(db, client_id)
    if client is None:
        raise NotFoundError("Client")

    assignment = await dev_assignment_ops.assign(db, client_id, data.user_id, data.role)
    return {"success": True, "assignment": _serialize_assignment(assignment)}


@router.delete("/{client_id}/devs")
async def remove_dev(
    client_id: uuid_pkg.UUID,
    db: DbSession,
    assignment_id: uuid_pkg.UUID | None = Query(None, alias="assignmentId"),
):
    """Remove a developer assignment."""
    if assignment_id is None:
        raise ValidationError("assignmentId is required")

    removed = await dev_assignment_ops.remove(db, client_id, assignment_id)
    if not removed:
        raise NotFoundError("Assignment")
    return {"success": True}
