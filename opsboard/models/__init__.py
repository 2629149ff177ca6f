from opsboard.models.canonical_state import CanonicalState
from opsboard.models.client import (
    DevAssignmentCreate,
    DevClient,
    DevClientCreate,
    DevProject,
    DevProjectCreate,
    DevUser,
    DevUserClient,
)
from opsboard.models.ops_event import OpsEvent
from opsboard.models.repo_registry import (
    RepoRegistry,
    RepoRegistryCreate,
    RepoRegistryUpdate,
)

__all__ = [
    "OpsEvent",
    "CanonicalState",
    "RepoRegistry",
    "RepoRegistryCreate",
    "RepoRegistryUpdate",
    "DevClient",
    "DevClientCreate",
    "DevUser",
    "DevUserClient",
    "DevAssignmentCreate",
    "DevProject",
    "DevProjectCreate",
]
