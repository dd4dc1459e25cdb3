__version__ = "0.1.0"

from .benchstat import Collection, Table
from .cli import main
from .config import BenchdiffConfig
from .errors import BenchdiffError, BenchmarkCommandError, FormatError
from .formatters import get_formatter
from .git import GitCommandError, GitStep, at_git_ref, run_at_git_ref
from .runner import Benchdiff, BenchdiffResult, BenchOptions, compare_files

__all__ = [
    "__version__",
    "Benchdiff",
    "BenchdiffConfig",
    "BenchdiffError",
    "BenchdiffResult",
    "BenchOptions",
    "BenchmarkCommandError",
    "Collection",
    "FormatError",
    "GitCommandError",
    "GitStep",
    "Table",
    "at_git_ref",
    "compare_files",
    "get_formatter",
    "main",
    "run_at_git_ref",
]
