"""Run code against the worktree as it existed at another git ref.

The worktree's uncommitted edits are stashed, the ref is checked out
detached, the caller's code runs, and then the original ref is checked out
again and the stash popped. Untracked files are never moved: checkout refuses
to overwrite them, so they stay readable while the caller's code runs.

Restoration always runs, whether the caller's code returns or raises, and
every restoration step is attempted even if an earlier one failed.

Callers must hold exclusive use of ``workdir`` for the duration of the call;
nothing here locks it.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from .commands import STASH_MESSAGE_PREFIX, GitRunner, OriginalRef
from .errors import GitCommandError

module_logger = logging.getLogger(__name__)


def _restore(git: GitRunner, original: OriginalRef, stash: str | None) -> list[GitCommandError]:
    failures: list[GitCommandError] = []
    try:
        git.checkout_original(original)
    except GitCommandError as exc:
        git.logger.error("Failed to check out %s again: %s", original.name, exc)
        failures.append(exc)
    if stash is not None:
        try:
            git.stash_pop(stash)
        except GitCommandError as exc:
            git.logger.error(
                "Failed to restore stashed changes (stash %s is kept; run 'git stash list'): %s",
                stash,
                exc,
            )
            failures.append(exc)
    return failures


@contextmanager
def at_git_ref(
    ref: str,
    *,
    git_cmd: str = "git",
    workdir: str | Path = ".",
    logger: logging.Logger | None = None,
) -> Iterator[None]:
    """Context manager that materializes ``ref`` in ``workdir`` for its body.

    Raises:
        GitCommandError: A git step failed. If the body also raised, the body's
            exception propagates instead, with restore failures added as notes.
    """
    git = GitRunner(git_cmd, workdir, logger=logger or module_logger)

    original = git.current_ref()
    stash = git.stash_push(f"{STASH_MESSAGE_PREFIX}: stash before checkout of {ref}")

    try:
        git.checkout_detached(ref)
    except GitCommandError as exc:
        if stash is not None:
            try:
                git.stash_pop(stash)
            except GitCommandError as pop_exc:
                git.logger.error("Failed to restore stashed changes %s: %s", stash, pop_exc)
                exc.add_note(f"restoring stashed changes also failed: {pop_exc}")
        raise

    git.logger.debug("Checked out %s in %s (was %s)", ref, git.workdir, original.name)
    body_error: BaseException | None = None
    try:
        yield
    except BaseException as exc:
        body_error = exc
        raise
    finally:
        failures = _restore(git, original, stash)
        if body_error is not None:
            for failure in failures:
                body_error.add_note(f"worktree restore failed: {failure}")
        elif failures:
            first = failures[0]
            for failure in failures[1:]:
                first.add_note(f"worktree restore also failed: {failure}")
            raise first


def run_at_git_ref(
    logger: logging.Logger | None,
    git_cmd: str,
    workdir: str | Path,
    ref: str,
    fn: Callable[[], None],
) -> None:
    """Call ``fn`` with ``workdir`` checked out at ``ref``, then restore it."""
    with at_git_ref(ref, git_cmd=git_cmd, workdir=workdir, logger=logger):
        fn()
