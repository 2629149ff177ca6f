"""Exceptions for git command execution."""

from opsboard.core.shell import CommandError


class GitCommandError(CommandError):
    """A git invocation against a repository failed."""
