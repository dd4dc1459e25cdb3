import shutil
import subprocess  # nosec B404
from collections.abc import Callable
from pathlib import Path

import pytest

from benchdiff.git import GitCommandError, GitRunner, GitStep, at_git_ref, run_at_git_ref

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not available")


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _stash_list(git: Callable[..., str], repo: Path) -> list[str]:
    return [line for line in git(repo, "stash", "list", "--format=%H").splitlines() if line]


class TestRunAtGitRef:
    def test_restores_edits_and_keeps_untracked_visible(
        self, git_repo: Path, git: Callable[..., str]
    ) -> None:
        foo = git_repo / "foo"
        untracked = git_repo / "untracked"
        untracked.write_text("untracked", encoding="utf-8")
        foo.write_text("new content", encoding="utf-8")
        seen: dict[str, str] = {}

        def fn() -> None:
            seen["untracked"] = _read(untracked)
            seen["foo"] = _read(foo)

        run_at_git_ref(None, "git", git_repo, "HEAD", fn)

        assert seen == {"untracked": "untracked", "foo": "OG content"}
        assert _read(foo) == "new content"
        assert _read(untracked) == "untracked"
        assert _stash_list(git, git_repo) == []

    def test_older_commit_is_visible(self, git_repo: Path, git: Callable[..., str]) -> None:
        foo = git_repo / "foo"
        foo.write_text("second", encoding="utf-8")
        git(git_repo, "commit", "--quiet", "-am", "second")
        foo.write_text("dirty", encoding="utf-8")
        seen: list[str] = []

        run_at_git_ref(None, "git", git_repo, "HEAD~1", lambda: seen.append(_read(foo)))

        assert seen == ["OG content"]
        assert _read(foo) == "dirty"
        assert git(git_repo, "symbolic-ref", "--short", "HEAD").strip() == "main"

    def test_callback_error_propagates_after_restore(
        self, git_repo: Path, git: Callable[..., str]
    ) -> None:
        foo = git_repo / "foo"
        untracked = git_repo / "untracked"
        untracked.write_text("untracked", encoding="utf-8")
        foo.write_text("new content", encoding="utf-8")

        def fn() -> None:
            raise ValueError("benchmark exploded")

        with pytest.raises(ValueError, match="benchmark exploded") as exc_info:
            run_at_git_ref(None, "git", git_repo, "HEAD", fn)

        assert not getattr(exc_info.value, "__notes__", [])
        assert _read(foo) == "new content"
        assert _read(untracked) == "untracked"
        assert _stash_list(git, git_repo) == []

    def test_clean_worktree_creates_no_stash(self, git_repo: Path, git: Callable[..., str]) -> None:
        calls: list[str] = []

        run_at_git_ref(None, "git", git_repo, "HEAD", lambda: calls.append("ran"))

        assert calls == ["ran"]
        assert _stash_list(git, git_repo) == []
        assert git(git_repo, "status", "--porcelain") == ""

    def test_repeated_runs_leave_worktree_unchanged(
        self, git_repo: Path, git: Callable[..., str]
    ) -> None:
        foo = git_repo / "foo"
        foo.write_text("new content", encoding="utf-8")
        (git_repo / "untracked").write_text("untracked", encoding="utf-8")
        before = git(git_repo, "status", "--porcelain")

        for _ in range(3):
            run_at_git_ref(None, "git", git_repo, "HEAD", lambda: None)

        assert git(git_repo, "status", "--porcelain") == before
        assert _read(foo) == "new content"

    def test_staged_changes_stay_staged(self, git_repo: Path, git: Callable[..., str]) -> None:
        foo = git_repo / "foo"
        foo.write_text("staged", encoding="utf-8")
        git(git_repo, "add", "foo")

        run_at_git_ref(None, "git", git_repo, "HEAD", lambda: None)

        assert _read(foo) == "staged"
        assert git(git_repo, "diff", "--cached", "--name-only").split() == ["foo"]

    def test_existing_user_stash_is_not_popped(
        self, git_repo: Path, git: Callable[..., str]
    ) -> None:
        foo = git_repo / "foo"
        foo.write_text("user stash", encoding="utf-8")
        git(git_repo, "stash", "push", "--quiet", "--message", "mine")
        user_stash = _stash_list(git, git_repo)
        foo.write_text("new content", encoding="utf-8")

        run_at_git_ref(None, "git", git_repo, "HEAD", lambda: None)

        assert _read(foo) == "new content"
        assert _stash_list(git, git_repo) == user_stash

    def test_detached_head_is_restored(self, git_repo: Path, git: Callable[..., str]) -> None:
        foo = git_repo / "foo"
        foo.write_text("second", encoding="utf-8")
        git(git_repo, "commit", "--quiet", "-am", "second")
        git(git_repo, "checkout", "--quiet", "--detach", "HEAD~1")
        start = git(git_repo, "rev-parse", "HEAD").strip()
        seen: list[str] = []

        run_at_git_ref(None, "git", git_repo, "main", lambda: seen.append(_read(foo)))

        assert seen == ["second"]
        original = GitRunner("git", git_repo).current_ref()
        assert original.detached
        assert original.name == start
        assert _read(foo) == "OG content"

    def test_bad_ref_restores_stash(self, git_repo: Path, git: Callable[..., str]) -> None:
        foo = git_repo / "foo"
        foo.write_text("new content", encoding="utf-8")
        calls: list[str] = []

        with pytest.raises(GitCommandError) as exc_info:
            run_at_git_ref(None, "git", git_repo, "no-such-ref", lambda: calls.append("ran"))

        assert exc_info.value.step is GitStep.CHECKOUT
        assert calls == []
        assert _read(foo) == "new content"
        assert _stash_list(git, git_repo) == []

    def test_untracked_file_blocking_checkout_is_kept(
        self, git_repo: Path, git: Callable[..., str]
    ) -> None:
        git(git_repo, "checkout", "--quiet", "-b", "other")
        (git_repo / "bar").write_text("committed", encoding="utf-8")
        git(git_repo, "add", "bar")
        git(git_repo, "commit", "--quiet", "-m", "add bar")
        git(git_repo, "checkout", "--quiet", "main")
        bar = git_repo / "bar"
        bar.write_text("mine", encoding="utf-8")

        with pytest.raises(GitCommandError) as exc_info:
            run_at_git_ref(None, "git", git_repo, "other", lambda: None)

        assert exc_info.value.step is GitStep.CHECKOUT
        assert _read(bar) == "mine"
        assert git(git_repo, "symbolic-ref", "--short", "HEAD").strip() == "main"

    def test_missing_git_binary(self, git_repo: Path) -> None:
        with pytest.raises(GitCommandError) as exc_info:
            run_at_git_ref(None, str(git_repo / "no-git"), git_repo, "HEAD", lambda: None)

        assert exc_info.value.step is GitStep.RESOLVE
        assert exc_info.value.returncode is None


class TestAtGitRef:
    def test_context_manager_form(self, git_repo: Path, git: Callable[..., str]) -> None:
        foo = git_repo / "foo"
        foo.write_text("new content", encoding="utf-8")

        with at_git_ref("HEAD", workdir=git_repo):
            assert _read(foo) == "OG content"

        assert _read(foo) == "new content"

    def test_restore_failure_is_noted_on_body_error(
        self, git_repo: Path, git: Callable[..., str]
    ) -> None:
        foo = git_repo / "foo"
        foo.write_text("new content", encoding="utf-8")

        with pytest.raises(KeyError) as exc_info:
            with at_git_ref("HEAD", workdir=git_repo):
                # drop benchdiff's stash entry so restoring it fails
                subprocess.run(  # nosec B603 B607
                    ["git", "stash", "drop", "--quiet"], cwd=git_repo, check=True
                )
                raise KeyError("boom")

        notes = getattr(exc_info.value, "__notes__", [])
        assert any("is no longer present" in note for note in notes)
