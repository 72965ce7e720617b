from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from lsbranch import config, git

requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git is not installed"
)


def make_repo_ref(path: Path | str, alias: str | None = None) -> config.RepoRef:
    return config.RepoRef(path=str(path), alias=alias)


def make_fake_clone(path: Path, head: str | None = "ref: refs/heads/main\n") -> Path:
    """Create a directory that looks like a git clone, without running git."""
    git_dir = path / ".git"
    git_dir.mkdir(parents=True)
    if head is not None:
        (git_dir / "HEAD").write_text(head, encoding="utf-8")
    return path


def make_git_repo(path: Path, branches: list[str], checked_out: str) -> Path:
    """Create a real git repo with one commit and the given branches."""
    path.mkdir(parents=True, exist_ok=True)

    def run(*args: str) -> None:
        subprocess.run(
            [
                "git",
                "-c",
                "user.name=Test",
                "-c",
                "user.email=test@example.com",
                "-c",
                "commit.gpgsign=false",
                *args,
            ],
            cwd=path,
            check=True,
            capture_output=True,
        )

    run("init")
    run("symbolic-ref", "HEAD", f"refs/heads/{checked_out}")
    run("commit", "--allow-empty", "-m", "Initial commit")
    for branch in branches:
        if branch != checked_out:
            run("branch", branch)
    return path


def git_branch_output(
    stdout: str = "", stderr: str = "", exit_code: int = 0
) -> git.GitBranchOutput:
    return git.GitBranchOutput(exit_code=exit_code, stdout=stdout, stderr=stderr)


@pytest.fixture
def fake_git_branch(monkeypatch):
    """Replace `git branch` with canned output. Returns the list of calls."""
    calls: list[Path] = []
    outputs: dict[str, git.GitBranchOutput] = {}

    async def run_git_branch(repo_path: Path) -> git.GitBranchOutput:
        calls.append(repo_path)
        return outputs[str(repo_path)]

    monkeypatch.setattr("lsbranch.git.run_git_branch", run_git_branch)

    class FakeGitBranch:
        def __init__(self):
            self.calls = calls

        def set_output(self, repo_path: Path | str, output: git.GitBranchOutput):
            outputs[str(repo_path)] = output

    return FakeGitBranch()
