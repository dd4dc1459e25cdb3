from enum import Enum

from ..errors import BenchdiffError


class GitStep(str, Enum):
    """Git operations performed while running at a ref."""

    RESOLVE = "resolve"
    STASH = "stash"
    CHECKOUT = "checkout"
    RESTORE = "restore"
    STASH_POP = "stash_pop"


class GitCommandError(BenchdiffError):
    """A git command failed.

    Attributes:
        step: Which operation of the checkout/restore sequence failed.
        command: Full argv of the failed command.
        returncode: Exit status, or None if git could not be started.
        detail: stderr/stdout of the command, or the OS error.
    """

    error_code = "GIT_COMMAND_FAILED"

    def __init__(
        self,
        *,
        step: GitStep,
        command: list[str],
        returncode: int | None,
        detail: str,
    ) -> None:
        self.step = step
        self.command = command
        self.returncode = returncode
        self.detail = detail
        status = "could not be started" if returncode is None else f"code {returncode}"
        details = f": {detail}" if detail else ""
        super().__init__(f"git {step.value} failed ({status}){details}")
