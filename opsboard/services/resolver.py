"""Resolve loose repository identifiers to registry slugs and paths.

Identifiers arrive as process names, slugs, or short names. Lookup order:
process name (optionally scoped to a droplet), exact slug, then a unique
slug suffix. Several suffix matches are ambiguous and fail closed.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from opsboard.core.exceptions import ConflictError, NotFoundError
from opsboard.domain.canonical_state_operations import canonical_state_ops
from opsboard.domain.registry_operations import registry_ops

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveResult:
    repo_slug: str
    display_name: str | None
    source: str  # pm2_name | direct_slug | fuzzy_match
    droplet: str | None = None
    matched_pm2: str | None = None


class RepoResolver:
    """Registry-backed identifier and path resolution."""

    async def resolve_identifier(
        self,
        db: AsyncSession,
        identifier: str,
        droplet: str | None = None,
    ) -> ResolveResult:
        entry = await registry_ops.get_by_pm2_name(db, identifier, droplet)
        if entry is not None:
            return ResolveResult(
                repo_slug=entry.repo_slug,
                display_name=entry.display_name,
                source="pm2_name",
                droplet=entry.droplet_name,
                matched_pm2=entry.pm2_name,
            )

        entry = await registry_ops.get_by_slug(db, identifier)
        if entry is not None:
            return ResolveResult(
                repo_slug=entry.repo_slug,
                display_name=entry.display_name,
                source="direct_slug",
                droplet=entry.droplet_name,
            )

        matches = await registry_ops.find_by_slug_suffix(db, identifier)
        if len(matches) == 1:
            entry = matches[0]
            return ResolveResult(
                repo_slug=entry.repo_slug,
                display_name=entry.display_name,
                source="fuzzy_match",
                droplet=entry.droplet_name,
            )
        if len(matches) > 1:
            slugs = ", ".join(m.repo_slug for m in matches)
            raise ConflictError(f"Ambiguous match for {identifier}: {slugs}")

        raise NotFoundError("Repo")

    async def resolve_server_path(self, db: AsyncSession, repo_slug: str) -> str:
        """Server path from the registry, falling back to the last reported path."""
        path = await registry_ops.get_server_path(db, repo_slug)
        if not path:
            path = await canonical_state_ops.find_repo_path(db, repo_slug)
        if not path:
            logger.info(f"No server path known for {repo_slug}")
            raise NotFoundError("Server path for repo")
        return path


repo_resolver = RepoResolver()
