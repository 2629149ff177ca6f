from fastapi import APIRouter

from opsboard.api.v1 import ai_team, clients, git_database, operations

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(git_database.router)
api_router.include_router(clients.router)
api_router.include_router(ai_team.router)
api_router.include_router(operations.router)
