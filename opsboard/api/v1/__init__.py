from opsboard.api.v1 import ai_team, clients, git_database, operations

__all__ = [
    "git_database",
    "clients",
    "ai_team",
    "operations",
]
