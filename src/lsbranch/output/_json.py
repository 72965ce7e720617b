import json

from .. import repo_status


class JSONOutput:
    def print_repo_statuses(
        self,
        results: list[repo_status.RepoStatusResult],
        all_branches: bool,
    ) -> None:
        data = [r.model_dump(mode="json", exclude_none=True) for r in results]
        print(json.dumps(data, indent=2))
