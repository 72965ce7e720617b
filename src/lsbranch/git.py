"""Git helpers for reading the checked out branch of a clone."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

REF_PREFIX = "ref: "


def parse_head(contents: str) -> str:
    """
    Parse the contents of a .git/HEAD file.

    The file either holds a symbolic ref (``ref: refs/heads/<branch>``), in
    which case the branch name is returned, or a commit SHA (detached HEAD),
    which is returned as-is.

    Does not raise. A ref with fewer than two ``/`` parses to ``""``.
    """
    if contents.startswith(REF_PREFIX):
        ref = contents[len(REF_PREFIX) :].strip()
        parts = ref.split("/", 2)
        if len(parts) < 3:
            return ""
        return parts[2]
    return contents.strip()


async def read_head(repo_path: Path) -> str:
    """Read .git/HEAD as text. Raises OSError (e.g. FileNotFoundError)."""
    head_path = repo_path / ".git" / "HEAD"
    logger.debug("Reading %s", head_path)
    return await asyncio.to_thread(
        head_path.read_text, encoding="utf-8", errors="replace"
    )


@dataclasses.dataclass(frozen=True)
class GitBranchOutput:
    exit_code: int
    stdout: str
    stderr: str


async def run_git_branch(repo_path: Path) -> GitBranchOutput:
    """
    Run ``git branch`` in the repo and capture its output.

    Nothing is written to our own stdout/stderr. Raises FileNotFoundError if
    git or the working directory is missing.
    """
    logger.debug("Running git branch in %s", repo_path)
    process = await asyncio.create_subprocess_exec(
        "git",
        "branch",
        cwd=repo_path,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()
    exit_code = process.returncode
    assert exit_code is not None
    logger.debug("git branch in %s exited with %d", repo_path, exit_code)
    return GitBranchOutput(
        exit_code=exit_code,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
