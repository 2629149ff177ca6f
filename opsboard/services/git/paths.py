"""Sandbox checks for repository paths handed to git.

Both the path and the commit sha end up in a subprocess argument vector, so
a path is only accepted when it resolves under an allowed root and looks
like a working tree.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from opsboard.core.exceptions import PolicyError

logger = logging.getLogger(__name__)


def is_under_root(path: Path, root: str) -> bool:
    """True if ``path`` is ``root`` or lives beneath it (after resolving symlinks)."""
    root_path = Path(root).resolve()
    return path == root_path or root_path in path.parents


def check_repo_path(path: str, allowed_roots: Sequence[str]) -> Path:
    """Validate a resolved repository path.

    Returns:
        The resolved path

    Raises:
        PolicyError: outside the allowed roots, missing, or not a git working tree
    """
    resolved = Path(path).resolve()

    if not any(is_under_root(resolved, root) for root in allowed_roots):
        logger.warning(f"Refusing git access outside allowed roots: {path}")
        raise PolicyError("Path outside allowed directories")

    if not resolved.is_dir() or not (resolved / ".git").exists():
        raise PolicyError("Invalid git repository path")

    return resolved
