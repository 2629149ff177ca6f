from collections.abc import Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from opsboard.models.canonical_state import CanonicalState


class CanonicalStateOperations:
    """Read operations for the canonizer's reconciled state."""

    def __init__(self) -> None:
        self.model = CanonicalState

    async def list_by_types(
        self,
        db: AsyncSession,
        types: Sequence[str] = ("node", "repo"),
    ) -> list[CanonicalState]:
        """All rows of the given types, ordered by node, type, id."""
        statement = (
            select(CanonicalState)
            .where(CanonicalState.type.in_(types))  # type: ignore[attr-defined]
            .order_by(CanonicalState.node_id, CanonicalState.type, CanonicalState.id)
        )
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def find_repo_path(self, db: AsyncSession, repo: str) -> str | None:
        """Server path last reported for a repo, matched by name or id suffix."""
        state = CanonicalState.current_state
        statement = (
            select(state["path"].astext)  # type: ignore[index]
            .where(
                CanonicalState.type == "repo",
                or_(
                    state["repo"].astext == repo,  # type: ignore[index]
                    CanonicalState.id.endswith(f":{repo}", autoescape=True),  # type: ignore[attr-defined]
                ),
            )
            .limit(1)
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()


canonical_state_ops = CanonicalStateOperations()
