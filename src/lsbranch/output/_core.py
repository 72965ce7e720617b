import enum
from typing import Protocol

from .. import repo_status


class OutputFormat(enum.StrEnum):
    pretty = "pretty"
    markdown = "markdown"
    json = "json"

    @property
    def is_machine_readable(self) -> bool:
        return self == OutputFormat.json


class Output(Protocol):
    def print_repo_statuses(
        self,
        results: list[repo_status.RepoStatusResult],
        all_branches: bool,
    ) -> None: ...


def get_output(output_format: OutputFormat) -> Output:
    match output_format:
        case OutputFormat.pretty:
            from ._pretty import PrettyOutput

            return PrettyOutput()
        case OutputFormat.markdown:
            from ._markdown import MarkdownOutput

            return MarkdownOutput()
        case OutputFormat.json:
            from ._json import JSONOutput

            return JSONOutput()
