"""Git helpers for running benchmarks at a historical ref."""

from .commands import GitRunner, OriginalRef
from .errors import GitCommandError, GitStep
from .ref_runner import at_git_ref, run_at_git_ref

__all__ = [
    "GitCommandError",
    "GitRunner",
    "GitStep",
    "OriginalRef",
    "at_git_ref",
    "run_at_git_ref",
]
