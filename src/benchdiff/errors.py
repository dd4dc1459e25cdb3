class BenchdiffError(RuntimeError):
    """Base class for benchdiff failures."""

    error_code: str = "BENCHDIFF_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BenchmarkCommandError(BenchdiffError):
    """The benchmark subprocess could not be started or exited non-zero."""

    error_code = "BENCHMARK_FAILED"

    def __init__(self, command: list[str], returncode: int | None, detail: str) -> None:
        self.command = command
        self.returncode = returncode
        self.detail = detail
        status = "could not be started" if returncode is None else f"exited {returncode}"
        super().__init__(f"benchmark command {' '.join(command)!r} {status}: {detail}")


class FormatError(BenchdiffError):
    """Comparison output could not be produced."""

    error_code = "FORMAT_ERROR"
