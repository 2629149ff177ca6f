from opsboard.domain.canonical_state_operations import canonical_state_ops
from opsboard.domain.client_operations import client_ops
from opsboard.domain.dev_assignment_operations import dev_assignment_ops
from opsboard.domain.event_operations import event_ops
from opsboard.domain.registry_operations import registry_ops

__all__ = [
    "canonical_state_ops",
    "client_ops",
    "dev_assignment_ops",
    "event_ops",
    "registry_ops",
]
