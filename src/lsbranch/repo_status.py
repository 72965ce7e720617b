from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

import pydantic

from . import config, git

logger = logging.getLogger(__name__)


class _BaseModel(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(extra="forbid", frozen=True)


class RepoData(_BaseModel):
    checked_out_branch: str = pydantic.Field(min_length=1)
    other_branches: list[str] | None = None


class RepoStatusSuccess(_BaseModel):
    repo: config.RepoRef
    data: RepoData


class RepoStatusFailure(_BaseModel):
    repo: config.RepoRef
    error: str


RepoStatusResult = RepoStatusSuccess | RepoStatusFailure


async def resolve(repo: config.RepoRef, all_branches: bool) -> RepoStatusResult:
    """
    Resolve the checked out branch of a repo.

    Expected problems (no .git folder, git branch failing, etc.) are returned
    as a RepoStatusFailure. Other errors, like a HEAD file that can't be read
    due to permissions, are raised.
    """
    if all_branches:
        return await _resolve_all_branches(repo)
    return await _resolve_checked_out_branch(repo)


async def resolve_all(
    repos: Sequence[config.RepoRef], all_branches: bool
) -> list[RepoStatusResult]:
    """Resolve all repos concurrently. Results are in the same order as repos."""
    async with asyncio.TaskGroup() as tg:
        tasks = [tg.create_task(resolve(repo, all_branches)) for repo in repos]
    return [task.result() for task in tasks]


async def validate_repo_path(path: str) -> RepoStatusResult:
    return await resolve(config.RepoRef(path=path), all_branches=False)


async def _resolve_checked_out_branch(repo: config.RepoRef) -> RepoStatusResult:
    repo_path = Path(repo.path)
    try:
        contents = await git.read_head(repo_path)
    except FileNotFoundError:
        if not (repo_path / ".git").exists():
            return RepoStatusFailure(repo=repo, error=".git folder doesn't exist")
        return RepoStatusFailure(repo=repo, error=".git/HEAD file doesn't exist")

    if not contents:
        return RepoStatusFailure(repo=repo, error=".git/HEAD file is empty")

    branch = git.parse_head(contents)
    if not branch:
        return RepoStatusFailure(
            repo=repo, error=f".git/HEAD file could not be parsed: {contents.strip()}"
        )
    logger.debug("%s has %s checked out", repo.display_name, branch)
    return RepoStatusSuccess(repo=repo, data=RepoData(checked_out_branch=branch))


async def _resolve_all_branches(repo: config.RepoRef) -> RepoStatusResult:
    try:
        output = await git.run_git_branch(Path(repo.path))
    except FileNotFoundError as e:
        return RepoStatusFailure(
            repo=repo, error=f"git branch could not be started: {e}"
        )

    if output.exit_code != 0:
        return RepoStatusFailure(
            repo=repo,
            error=f"git branch failed with exit code {output.exit_code}: {output.stderr}",
        )
    # git branch doesn't write to stderr when it succeeds
    if output.stderr:
        return RepoStatusFailure(
            repo=repo, error=f"git branch wrote to stderr failed: {output.stderr}"
        )

    checked_out_branches: list[str] = []
    other_branches: list[str] = []
    for line in output.stdout.splitlines():
        line = line.strip()
        if not line:
            continue
        if line.startswith("*"):
            checked_out_branches.append(line[1:].strip())
        else:
            other_branches.append(line)

    if not checked_out_branches:
        return RepoStatusFailure(
            repo=repo, error="git branch did not report a checked out branch"
        )
    if len(checked_out_branches) > 1:
        return RepoStatusFailure(
            repo=repo,
            error=f"git branch reported multiple checked out branches: {', '.join(checked_out_branches)}",
        )

    return RepoStatusSuccess(
        repo=repo,
        data=RepoData(
            checked_out_branch=checked_out_branches[0],
            other_branches=other_branches,
        ),
    )
