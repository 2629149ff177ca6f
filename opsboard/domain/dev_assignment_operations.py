import uuid as uuid_pkg

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from opsboard.core.database import is_unique_violation
from opsboard.core.exceptions import ConflictError
from opsboard.models.client import DevUserClient

DEFAULT_ROLE = "developer"


class DevAssignmentOperations:
    """Assign developers to clients.

    Concurrent duplicate assignments are settled by the (user_id, client_id)
    unique constraint, not by locking.
    """

    def __init__(self) -> None:
        self.model = DevUserClient

    async def get(
        self,
        db: AsyncSession,
        client_id: uuid_pkg.UUID,
        assignment_id: uuid_pkg.UUID,
    ) -> DevUserClient | None:
        statement = select(DevUserClient).where(
            DevUserClient.id == assignment_id,
            DevUserClient.client_id == client_id,
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def assign(
        self,
        db: AsyncSession,
        client_id: uuid_pkg.UUID,
        user_id: uuid_pkg.UUID,
        role: str | None = None,
    ) -> DevUserClient:
        db_obj = DevUserClient(user_id=user_id, client_id=client_id, role=role or DEFAULT_ROLE)
        db.add(db_obj)
        try:
            await db.flush()
        except IntegrityError as e:
            if is_unique_violation(e):
                raise ConflictError("This user is already assigned to this client") from e
            raise
        await db.refresh(db_obj)
        return db_obj

    async def remove(
        self,
        db: AsyncSession,
        client_id: uuid_pkg.UUID,
        assignment_id: uuid_pkg.UUID,
    ) -> bool:
        db_obj = await self.get(db, client_id, assignment_id)
        if db_obj:
            await db.delete(db_obj)
            await db.flush()
            return True
        return False


dev_assignment_ops = DevAssignmentOperations()
