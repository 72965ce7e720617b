import dataclasses
from pathlib import Path
from typing import Annotated

import cyclopts

from .config import CONFIG_ENV_VAR, CONFIG_FILENAME

LogLevelFlag = Annotated[
    str,
    cyclopts.Parameter(
        name=["--log-level"],
        help="Log level (debug, info, warning, error, critical)",
    ),
]

DEFAULT_LOG_LEVEL = "warning"


@cyclopts.Parameter(name="*")
@dataclasses.dataclass(frozen=True)
class CommonFlags:
    """Flags shared by all commands."""

    config_path: Annotated[
        Path | None,
        cyclopts.Parameter(
            name=["--config", "-c"],
            help=f"Override the config file path. Set via the {CONFIG_ENV_VAR} environment variable or the --config flag. Defaults to ~/{CONFIG_FILENAME}",
        ),
    ] = None
    no_update_check: Annotated[
        bool,
        cyclopts.Parameter(
            name=["--no-update-check"],
            help="Do not check PyPI for a newer version",
            negative=(),
        ),
    ] = False
    log_level: LogLevelFlag = DEFAULT_LOG_LEVEL
