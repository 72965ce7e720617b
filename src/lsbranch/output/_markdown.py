"""Markdown output formatting for coding agents."""

from tabulate import tabulate

from .. import repo_status
from ._common import NO_REPOS_MESSAGE, get_branch_lines


class MarkdownOutput:
    def print_repo_statuses(
        self,
        results: list[repo_status.RepoStatusResult],
        all_branches: bool,
    ) -> None:
        if not results:
            print(NO_REPOS_MESSAGE)
            return

        headers = ["Repo", "Branch"]
        if all_branches:
            headers.append("Other branches")
        headers.append("Error")

        rows = []
        for result in results:
            match result:
                case repo_status.RepoStatusFailure(error=error):
                    row = [result.repo.display_name, ""]
                    if all_branches:
                        row.append("")
                    row.append(_escape(error))
                case repo_status.RepoStatusSuccess():
                    checked_out_branch, *other_branches = get_branch_lines(result)
                    row = [result.repo.display_name, checked_out_branch]
                    if all_branches:
                        row.append(", ".join(other_branches))
                    row.append("")
            rows.append(row)

        print(tabulate(rows, headers=headers, tablefmt="github"))


def _escape(value: str) -> str:
    """Keep multi-line git errors within a single table cell."""
    return " ".join(value.split()).replace("|", "\\|")
