"""Shared helpers used across output implementations."""

from .. import repo_status

NO_REPOS_MESSAGE = "No repos configured"


def get_branch_lines(result: repo_status.RepoStatusSuccess) -> list[str]:
    """The checked out branch followed by any other branches."""
    return [result.data.checked_out_branch, *(result.data.other_branches or [])]
