"""Rich output formatting for CLI."""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .. import repo_status
from ._common import NO_REPOS_MESSAGE, get_branch_lines

console = Console()


class PrettyOutput:
    def print_repo_statuses(
        self,
        results: list[repo_status.RepoStatusResult],
        all_branches: bool,
    ) -> None:
        if not results:
            console.print(NO_REPOS_MESSAGE)
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Repo")
        table.add_column("Branch")

        for result in results:
            table.add_row(
                Text(result.repo.display_name),
                _format_branch_cell(result, all_branches),
            )

        console.print(table)


def _format_branch_cell(
    result: repo_status.RepoStatusResult, all_branches: bool
) -> Text:
    match result:
        case repo_status.RepoStatusFailure(error=error):
            return Text(error.strip(), style="red")
        case repo_status.RepoStatusSuccess():
            checked_out_branch, *other_branches = get_branch_lines(result)
            # Highlight the checked out branch when listed alongside the others
            text = Text(checked_out_branch, style="green" if all_branches else "")
            for other_branch in other_branches:
                text.append("\n" + other_branch)
            return text
