import asyncio
import logging
from pathlib import Path
from typing import Annotated, NoReturn

import cyclopts
import httpx
from rich.console import Console
from rich.markup import escape
from rich.traceback import install as install_rich_traceback

from . import config, flags, output, repo_status, update_check

TOOL_NAME = "lsbranch"

error_console = Console(stderr=True)
install_rich_traceback(console=error_console)

app = cyclopts.App(
    name=TOOL_NAME,
    help="List the checked out branches of your git clones",
    error_console=error_console,
)

app.register_install_completion_command()


@app.default
@app.command(name="ls", alias=["list"])
async def ls(
    *,
    all_branches: Annotated[
        bool,
        cyclopts.Parameter(
            name=["--all", "-a"],
            help="Show all local branches, not just the checked out one",
            negative=(),
        ),
    ] = False,
    output_format: Annotated[
        output.OutputFormat,
        cyclopts.Parameter(
            name=["--output-format"],
            help="Output format",
        ),
    ] = output.OutputFormat.pretty,
    common_flags: flags.CommonFlags = flags.CommonFlags(),
) -> None:
    """List the checked out branch of each repo"""
    _setup_logging(common_flags.log_level)
    config_store = _get_config_store(common_flags)
    if not config_store.exists():
        if config_store.is_default_path:
            _fail(f'No repos have been configured. Add a repo with "{TOOL_NAME} add"')
        else:
            _fail(f"Config file does not exist: {config_store.path}")
    _validate_config(config_store)

    repos = config_store.get_repos()
    check_for_updates = not (
        output_format.is_machine_readable or common_flags.no_update_check
    )
    async with asyncio.TaskGroup() as tg:
        results_task = tg.create_task(repo_status.resolve_all(repos, all_branches))
        update_message_task = tg.create_task(
            _get_update_message(config_store, check_for_updates)
        )

    out = output.get_output(output_format)
    out.print_repo_statuses(results_task.result(), all_branches)
    _print_update_message(update_message_task.result())


@app.command(name="add")
async def add(
    *,
    path: Annotated[
        Path,
        cyclopts.Parameter(
            name=["--path"],
            help="The path to the repo root",
        ),
    ],
    alias: Annotated[
        str | None,
        cyclopts.Parameter(
            name=["--alias"],
            help="The repo's alias, shown instead of its path",
        ),
    ] = None,
    no_validate: Annotated[
        bool,
        cyclopts.Parameter(
            name=["--no-validate"],
            help="Do not check that the repo being added exists and is valid",
            negative=(),
        ),
    ] = False,
    common_flags: flags.CommonFlags = flags.CommonFlags(),
) -> None:
    """Add a repo"""
    _setup_logging(common_flags.log_level)
    config_store = _get_config_store(common_flags)
    if config_store.exists():
        _validate_config(config_store)

    repo = config.RepoRef(path=str(path.expanduser().resolve()), alias=alias)

    validation_task = None
    async with asyncio.TaskGroup() as tg:
        update_message_task = tg.create_task(
            _get_update_message(config_store, not common_flags.no_update_check)
        )
        if not no_validate:
            validation_task = tg.create_task(
                repo_status.validate_repo_path(repo.path)
            )

    if validation_task is not None:
        result = validation_task.result()
        if isinstance(result, repo_status.RepoStatusFailure):
            _fail(
                f"Specified repo path is not valid: {result.error}\n"
                'If this is expected, provide the "--no-validate" flag'
            )

    try:
        config_store.add_repo(repo)
    except config.ConfigError as e:
        _fail(str(e))

    Console().print(f"[green]Added[/green] {escape(repo.display_name)}")
    _print_update_message(update_message_task.result())


def _setup_logging(log_level: str) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(levelname)s [%(name)s] %(message)s",
    )


def _get_config_store(common_flags: flags.CommonFlags) -> config.ConfigStore:
    return config.ConfigStore(config.resolve_config_path(common_flags.config_path))


def _validate_config(config_store: config.ConfigStore) -> None:
    issues = config_store.validate()
    if issues:
        for issue in issues:
            error_console.print(escape(issue))
        _fail("Found config validation errors.")


async def _get_update_message(
    config_store: config.ConfigStore, enabled: bool
) -> str | None:
    if not enabled:
        return None
    async with httpx.AsyncClient() as client:
        return await update_check.get_update_message(config_store, client)


def _print_update_message(message: str | None) -> None:
    if message is not None:
        error_console.print()
        error_console.print(f"[yellow]{escape(message)}[/yellow]")


def _fail(message: str) -> NoReturn:
    error_console.print(f"[red]Error:[/red] {escape(message)}")
    raise SystemExit(1)


def main() -> None:
    try:
        app()
    except config.ConfigError as e:
        _fail(str(e))
