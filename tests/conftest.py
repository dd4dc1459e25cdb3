import subprocess  # nosec B404
from collections.abc import Callable, Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from benchdiff.observability import clear_context

SAMPLE_OLD = """goos: linux
goarch: amd64
pkg: example.com/mod/parser
BenchmarkParse-8   	 1000000	      1000 ns/op	     128 B/op
BenchmarkParse-8   	 1000000	      1010 ns/op	     128 B/op
BenchmarkParse-8   	 1000000	       990 ns/op	     128 B/op
BenchmarkParse-8   	 1000000	      1005 ns/op	     128 B/op
BenchmarkParse-8   	 1000000	       995 ns/op	     128 B/op
BenchmarkLex-8     	 2000000	       500 ns/op	      64 B/op
BenchmarkLex-8     	 2000000	       502 ns/op	      64 B/op
BenchmarkLex-8     	 2000000	       498 ns/op	      64 B/op
BenchmarkLex-8     	 2000000	       501 ns/op	      64 B/op
BenchmarkLex-8     	 2000000	       499 ns/op	      64 B/op
PASS
ok  	example.com/mod/parser	12.345s
"""

SAMPLE_NEW = """goos: linux
goarch: amd64
pkg: example.com/mod/parser
BenchmarkParse-8   	 1000000	      1500 ns/op	     128 B/op
BenchmarkParse-8   	 1000000	      1510 ns/op	     128 B/op
BenchmarkParse-8   	 1000000	      1490 ns/op	     128 B/op
BenchmarkParse-8   	 1000000	      1505 ns/op	     128 B/op
BenchmarkParse-8   	 1000000	      1495 ns/op	     128 B/op
BenchmarkLex-8     	 2000000	       250 ns/op	      64 B/op
BenchmarkLex-8     	 2000000	       251 ns/op	      64 B/op
BenchmarkLex-8     	 2000000	       249 ns/op	      64 B/op
BenchmarkLex-8     	 2000000	       252 ns/op	      64 B/op
BenchmarkLex-8     	 2000000	       248 ns/op	      64 B/op
PASS
ok  	example.com/mod/parser	12.345s
"""


@pytest.fixture(autouse=True)
def mock_log_path(tmp_path: Path) -> Generator[Path, None, None]:
    """Route the JSONL event log into tmp_path and enable it for all tests."""
    log_file = tmp_path / "benchdiff-test.log"
    with (
        patch("benchdiff.config.settings.BENCHDIFF_LOGGING", True),
        patch("benchdiff.config.settings.LOG_PATH", log_file),
    ):
        yield log_file
    clear_context()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in [
        "BENCHDIFF_GIT_CMD",
        "BENCHDIFF_GO_CMD",
        "BENCHDIFF_WORKDIR",
        "BENCHDIFF_LOG_LEVEL",
        "BENCHDIFF_LOGGING",
        "BENCHDIFF_DOTENV_PATH",
    ]:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def sample_files(tmp_path: Path) -> tuple[Path, Path]:
    old = tmp_path / "old.txt"
    new = tmp_path / "new.txt"
    old.write_text(SAMPLE_OLD, encoding="utf-8")
    new.write_text(SAMPLE_NEW, encoding="utf-8")
    return old, new


@pytest.fixture
def git_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate git from the user's configuration."""
    global_config = tmp_path / "gitconfig"
    global_config.write_text("", encoding="utf-8")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Bench Tester")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "bench@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Bench Tester")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "bench@example.com")


@pytest.fixture
def git(git_env: None) -> Callable[..., str]:
    """Run git in a directory and return stdout; fails the test on error."""

    def run(cwd: Path, *args: str) -> str:
        result = subprocess.run(  # nosec B603 B607
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        assert result.returncode == 0, f"git {' '.join(args)} failed: {result.stderr}"
        return result.stdout

    return run


@pytest.fixture
def git_repo(tmp_path: Path, git: Callable[..., str]) -> Path:
    """A repository on branch main with one commit tracking ``foo``."""
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "--quiet")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    (repo / "foo").write_text("OG content", encoding="utf-8")
    git(repo, "add", "foo")
    git(repo, "commit", "--quiet", "-m", "ignore me")
    return repo
