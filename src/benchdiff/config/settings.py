import logging
import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_state_dir

from .compat import env_bool

logger = logging.getLogger(__name__)

__all__ = [
    "BENCHDIFF_LOGGING",
    "LOG_LEVEL",
    "LOG_PATH",
    "BenchdiffConfig",
]

# Stderr logging level for the CLI
LOG_LEVEL = (os.getenv("BENCHDIFF_LOG_LEVEL", "") or "WARNING").strip().upper()

# Local JSONL event log (default: off)
BENCHDIFF_LOGGING = env_bool("BENCHDIFF_LOGGING", default=False)

# Logging - Cross-platform state directory:
# - Linux: ~/.local/state/benchdiff
# - macOS: ~/Library/Application Support/benchdiff
# - Windows: %LOCALAPPDATA%\benchdiff
# Directory is created lazily when the first event is written
LOG_DIR = Path(user_state_dir("benchdiff", appauthor=False))
LOG_PATH = LOG_DIR / "benchdiff.log"
MAX_LOG_SIZE_BYTES = 10 * 1024 * 1024
MAX_ROTATED_LOGS = 5


@dataclass(frozen=True)
class BenchdiffConfig:
    git_cmd: str = "git"
    go_cmd: str = "go"
    workdir: str | None = None  # None means the current directory

    @classmethod
    def from_env(cls) -> "BenchdiffConfig":
        git_cmd = os.getenv("BENCHDIFF_GIT_CMD", "").strip() or "git"
        go_cmd = os.getenv("BENCHDIFF_GO_CMD", "").strip() or "go"

        workdir = os.getenv("BENCHDIFF_WORKDIR", "").strip() or None
        if workdir:
            if not os.path.isdir(workdir):
                raise RuntimeError(
                    f"BENCHDIFF_WORKDIR does not exist or is not a directory: {workdir}"
                )
            workdir = str(Path(workdir).resolve())
            logger.debug("Using BENCHDIFF_WORKDIR: %s", workdir)

        return cls(git_cmd=git_cmd, go_cmd=go_cmd, workdir=workdir)
