import logging
import shlex
import subprocess  # nosec B404
import tempfile
import time
from dataclasses import dataclass, field, replace
from pathlib import Path

from .benchstat import Collection, Table
from .errors import BenchmarkCommandError
from .git import run_at_git_ref
from .observability import log_event, new_run_id

logger = logging.getLogger(__name__)

WORKTREE_CONFIG = "worktree"


@dataclass(frozen=True)
class BenchOptions:
    """Arguments for ``go test -bench``."""

    bench: str = "."
    packages: str = "./..."
    count: int = 10
    benchmem: bool = False
    benchtime: str | None = None
    cpu: str | None = None
    tags: str | None = None
    warmup_count: int = 0
    warmup_time: str | None = None
    go_cmd: str = "go"

    def command(self, *, count: int | None = None, benchtime: str | None = None) -> list[str]:
        cmd = [self.go_cmd, "test", "-run", "^$", "-bench", self.bench]
        cmd.extend(["-count", str(self.count if count is None else count)])
        if self.benchmem:
            cmd.append("-benchmem")
        benchtime = benchtime or self.benchtime
        if benchtime:
            cmd.extend(["-benchtime", benchtime])
        if self.cpu:
            cmd.extend(["-cpu", self.cpu])
        if self.tags:
            cmd.extend(["-tags", self.tags])
        cmd.extend(shlex.split(self.packages))
        return cmd

    def warmup_command(self) -> list[str] | None:
        if self.warmup_count <= 0:
            return None
        return self.command(count=self.warmup_count, benchtime=self.warmup_time)


def run_bench_command(command: list[str], workdir: str | Path, output: Path | None) -> None:
    """Run a benchmark command, writing its stdout to ``output`` (or discarding it)."""
    log_event({"kind": "bench_start", "command": command, "cwd": str(workdir)})
    started = time.perf_counter()
    try:
        if output is None:
            result = subprocess.run(  # nosec B603
                command,
                cwd=workdir,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                check=False,
            )
        else:
            with output.open("w", encoding="utf-8") as f:
                result = subprocess.run(  # nosec B603
                    command,
                    cwd=workdir,
                    stdout=f,
                    stderr=subprocess.PIPE,
                    text=True,
                    check=False,
                )
    except OSError as exc:
        log_event(
            {
                "kind": "bench_error",
                "command": command,
                "error_type": type(exc).__name__,
                "error": str(exc),
            }
        )
        raise BenchmarkCommandError(command, None, str(exc)) from exc

    latency_ms = int((time.perf_counter() - started) * 1000)
    if result.returncode != 0:
        detail = (result.stderr or "").strip()
        log_event(
            {
                "kind": "bench_error",
                "command": command,
                "returncode": result.returncode,
                "latency_ms": latency_ms,
                "stderr": detail,
            }
        )
        raise BenchmarkCommandError(command, result.returncode, detail)

    log_event(
        {
            "kind": "bench_complete",
            "command": command,
            "latency_ms": latency_ms,
            "output": str(output) if output is not None else None,
        }
    )
    logger.info("Benchmarks finished in %.1fs", latency_ms / 1000)


@dataclass
class BenchdiffResult:
    base_ref: str
    tables: list[Table] = field(default_factory=list)

    def has_degradation(self) -> bool:
        """True when any table reports a significant change for the worse."""
        return any(row.change < 0 for table in self.tables for row in table.rows)


class Benchdiff:
    """Runs benchmarks at ``base_ref`` and in the current worktree and compares them."""

    def __init__(
        self,
        *,
        base_ref: str = "HEAD",
        workdir: str | Path = ".",
        git_cmd: str = "git",
        options: BenchOptions | None = None,
        collection: Collection | None = None,
    ) -> None:
        self.base_ref = base_ref
        self.workdir = Path(workdir)
        self.git_cmd = git_cmd
        self.options = options or BenchOptions()
        self.collection = collection or Collection()

    def _run_benchmarks(self, output: Path) -> None:
        warmup = self.options.warmup_command()
        if warmup is not None:
            logger.info("Warming up: %s", " ".join(warmup))
            run_bench_command(warmup, self.workdir, None)
        command = self.options.command()
        logger.info("Running: %s", " ".join(command))
        run_bench_command(command, self.workdir, output)

    def run(self) -> BenchdiffResult:
        new_run_id()
        with tempfile.TemporaryDirectory(prefix="benchdiff-") as tmp:
            base_file = Path(tmp) / "base.txt"
            head_file = Path(tmp) / "worktree.txt"

            logger.info("Running benchmarks at %s", self.base_ref)
            run_at_git_ref(
                logger,
                self.git_cmd,
                self.workdir,
                self.base_ref,
                lambda: self._run_benchmarks(base_file),
            )

            logger.info("Running benchmarks in the worktree")
            self._run_benchmarks(head_file)

            # fresh sample state per run, same settings
            collection = replace(self.collection)
            collection.add_file(self.base_ref, base_file)
            collection.add_file(WORKTREE_CONFIG, head_file)
            tables = collection.tables()

        return BenchdiffResult(base_ref=self.base_ref, tables=tables)


def compare_files(
    old: str | Path, new: str | Path, collection: Collection | None = None
) -> list[Table]:
    """Compare two existing sample files without touching git."""
    collection = collection or Collection()
    collection.add_file(str(old), old)
    collection.add_file(str(new), new)
    return collection.tables()
