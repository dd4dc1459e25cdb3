import logging
import subprocess  # nosec B404
from dataclasses import dataclass
from pathlib import Path

from ..observability import log_event
from .errors import GitCommandError, GitStep

module_logger = logging.getLogger(__name__)

STASH_MESSAGE_PREFIX = "benchdiff"


def _format_error_detail(stdout: str, stderr: str) -> str:
    stdout_text = (stdout or "").strip()
    stderr_text = (stderr or "").strip()
    if stderr_text and stdout_text and stdout_text != stderr_text:
        return f"{stderr_text}\n{stdout_text}"
    return stderr_text or stdout_text


@dataclass(frozen=True)
class OriginalRef:
    """What HEAD pointed at before benchdiff touched the worktree."""

    name: str
    detached: bool


class GitRunner:
    """Runs git subcommands in one working directory.

    No timeouts and no retries: a failed command is reported once as a
    GitCommandError tagged with the step it belongs to.
    """

    def __init__(
        self,
        git_cmd: str = "git",
        workdir: str | Path = ".",
        logger: logging.Logger | None = None,
    ) -> None:
        self.git_cmd = git_cmd
        self.workdir = str(workdir)
        self.logger = logger or module_logger

    def run(self, args: list[str], *, step: GitStep, check: bool = True) -> str:
        command = [self.git_cmd, *args]
        self.logger.debug("git %s: %s", step.value, " ".join(command))
        try:
            result = subprocess.run(  # nosec B603 B607
                command,
                cwd=self.workdir,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            log_event(
                {
                    "kind": "git_error",
                    "step": step.value,
                    "command": command,
                    "cwd": self.workdir,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                }
            )
            raise GitCommandError(
                step=step, command=command, returncode=None, detail=str(exc)
            ) from exc

        stdout = result.stdout or ""
        if stdout.strip():
            self.logger.debug("git %s output: %s", step.value, stdout.strip())

        if result.returncode != 0 and check:
            detail = _format_error_detail(stdout, result.stderr or "")
            log_event(
                {
                    "kind": "git_error",
                    "step": step.value,
                    "command": command,
                    "cwd": self.workdir,
                    "returncode": result.returncode,
                    "detail": detail,
                }
            )
            raise GitCommandError(
                step=step, command=command, returncode=result.returncode, detail=detail
            )

        log_event(
            {
                "kind": "git_command",
                "level": "debug",
                "step": step.value,
                "command": command,
                "cwd": self.workdir,
                "returncode": result.returncode,
            }
        )
        return stdout

    def current_ref(self) -> OriginalRef:
        """Return the branch HEAD is on, or the HEAD commit when detached."""
        branch = self.run(
            ["symbolic-ref", "--quiet", "--short", "HEAD"], step=GitStep.RESOLVE, check=False
        ).strip()
        if branch:
            return OriginalRef(name=branch, detached=False)
        sha = self.run(["rev-parse", "--verify", "HEAD"], step=GitStep.RESOLVE).strip()
        return OriginalRef(name=sha, detached=True)

    def stash_head(self, step: GitStep = GitStep.STASH) -> str | None:
        sha = self.run(
            ["rev-parse", "--quiet", "--verify", "refs/stash"], step=step, check=False
        ).strip()
        return sha or None

    def stash_push(self, label: str) -> str | None:
        """Stash staged and unstaged edits to tracked files.

        Untracked files stay in the worktree; checkout leaves them alone.

        Returns:
            The commit id of the stash entry created by this call, or None when
            there was nothing to stash.
        """
        before = self.stash_head()
        try:
            self.run(
                ["stash", "push", "--message", label],
                step=GitStep.STASH,
            )
        except GitCommandError as exc:
            # git may have recorded the entry before failing to clean the worktree
            created = self.stash_head()
            if created is not None and created != before:
                self.logger.error("git stash failed after creating %s; restoring it", created)
                try:
                    self.stash_pop(created)
                except GitCommandError as pop_exc:
                    exc.add_note(f"restoring stash {created} also failed: {pop_exc}")
            raise
        after = self.stash_head()
        if after is None or after == before:
            self.logger.debug("Nothing to stash in %s", self.workdir)
            return None
        return after

    def checkout_detached(self, ref: str) -> None:
        self.run(["checkout", "--quiet", "--detach", ref, "--"], step=GitStep.CHECKOUT)

    def checkout_original(self, original: OriginalRef) -> None:
        args = ["checkout", "--quiet"]
        if original.detached:
            args.append("--detach")
        args.extend([original.name, "--"])
        self.run(args, step=GitStep.RESTORE)

    def stash_pop(self, stash_sha: str) -> None:
        """Apply and drop the stash entry whose commit id is ``stash_sha``."""
        listing = self.run(["stash", "list", "--format=%H"], step=GitStep.STASH_POP)
        entries = [line.strip() for line in listing.splitlines() if line.strip()]
        if stash_sha not in entries:
            raise GitCommandError(
                step=GitStep.STASH_POP,
                command=[self.git_cmd, "stash", "list", "--format=%H"],
                returncode=0,
                detail=f"stash entry {stash_sha} is no longer present",
            )
        index = entries.index(stash_sha)
        self.run(
            ["stash", "pop", "--quiet", "--index", f"stash@{{{index}}}"],
            step=GitStep.STASH_POP,
        )
