"""
State fingerprints for cheap change polling.

Clients poll the short hash and only fetch the full repository detail when it
changes. The hash covers the observed git state of both sides, not the time
the reporters last checked in, so an unchanged repository keeps its hash
across reporting cycles and process restarts.
"""

import hashlib
import json

from opsboard.services.git_state.types import Observation

DEFAULT_HASH_LENGTH = 12


def serialize_state(server: Observation | None, pc: Observation | None) -> str:
    """Deterministic JSON for the (server, pc) state pair."""
    server_state = None
    if server is not None:
        server_state = {**server.snapshot.state(), "node_id": server.service_id}
    pc_state = pc.snapshot.state() if pc is not None else None

    return json.dumps(
        {"server": server_state, "pc": pc_state},
        sort_keys=True,
        separators=(",", ":"),
    )


def compute_state_hash(
    server: Observation | None,
    pc: Observation | None,
    length: int = DEFAULT_HASH_LENGTH,
) -> str:
    """
    Compute the polling fingerprint for one repository.

    Returns:
        First ``length`` hex characters of the SHA-256 of the serialized state
    """
    full_hash = hashlib.sha256(serialize_state(server, pc).encode()).hexdigest()
    return full_hash[:length]


# Hash reported for a repository neither side has seen
EMPTY_STATE_HASH = compute_state_hash(None, None)
