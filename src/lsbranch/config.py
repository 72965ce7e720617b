"""Persistent list of repos, stored as JSON in the user's home directory."""

from __future__ import annotations

import dataclasses
import datetime
import logging
import os
from collections import Counter
from pathlib import Path

import pydantic

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".lsbranchrc.json"
CONFIG_ENV_VAR = "LSBRANCH_CONFIG"

UPDATE_CHECK_FREQUENCY = datetime.timedelta(days=1)

_UNIQUE_FIELDS = ("path", "alias")


class ConfigError(Exception): ...


class _BaseModel(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(
        extra="forbid", frozen=True, populate_by_name=True
    )


class RepoRef(_BaseModel):
    path: str
    alias: str | None = None

    @property
    def display_name(self) -> str:
        return self.alias or self.path


class ConfigFile(_BaseModel):
    last_update_check: pydantic.AwareDatetime | None = pydantic.Field(
        default=None, alias="lastUpdateCheck"
    )
    repos: list[RepoRef] = []


def get_default_config_path() -> Path:
    return Path.home() / CONFIG_FILENAME


def resolve_config_path(config_flag: Path | None) -> Path:
    """
    Resolve the config file path.

    Priority: CLI flag > env var > ~/.lsbranchrc.json
    """
    path = config_flag or os.environ.get(CONFIG_ENV_VAR) or get_default_config_path()
    return Path(path).expanduser().resolve()


@dataclasses.dataclass
class ConfigStore:
    path: Path
    _data: ConfigFile | None = dataclasses.field(default=None, init=False)
    _exists: bool = dataclasses.field(default=False, init=False)

    @property
    def is_default_path(self) -> bool:
        return self.path == get_default_config_path().resolve()

    def exists(self) -> bool:
        self._load()
        return self._exists

    def get_repos(self) -> list[RepoRef]:
        return list(self._load().repos)

    def validate(self) -> list[str]:
        """Return one message per path or alias used by more than one repo."""
        repos = self._load().repos
        issues = []
        for field in _UNIQUE_FIELDS:
            counts = Counter(
                value
                for repo in repos
                if (value := getattr(repo, field)) is not None
            )
            for value, count in counts.items():
                if count > 1:
                    issues.append(f'Repo {field} "{value}" is specified multiple times.')
        return issues

    def add_repo(self, repo: RepoRef) -> None:
        data = self._load()
        issues = []
        for field in _UNIQUE_FIELDS:
            value = getattr(repo, field)
            if value is not None and any(
                getattr(existing, field) == value for existing in data.repos
            ):
                issues.append(f'Repo {field} "{value}" already exists')
        if issues:
            raise ConfigError("\n".join(issues))

        self._save(data.model_copy(update={"repos": [*data.repos, repo]}))

    def should_check_for_updates(self, now: datetime.datetime) -> bool:
        last_update_check = self._load().last_update_check
        if last_update_check is None:
            return True
        return last_update_check + UPDATE_CHECK_FREQUENCY < now

    def set_last_update_check(self, now: datetime.datetime) -> None:
        data = self._load()
        self._save(data.model_copy(update={"last_update_check": now}))

    def _load(self) -> ConfigFile:
        if self._data is not None:
            return self._data

        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            logger.info("Config file %s does not exist", self.path)
            self._data = ConfigFile(
                last_update_check=datetime.datetime.now(datetime.timezone.utc)
            )
            self._exists = False
            return self._data

        try:
            self._data = ConfigFile.model_validate_json(raw)
        except pydantic.ValidationError as e:
            raise ConfigError(f"Invalid config file {self.path}:\n{e}") from e
        logger.info("Loaded config file %s", self.path)
        self._exists = True
        return self._data

    def _save(self, data: ConfigFile) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            data.model_dump_json(by_alias=True, exclude_none=True, indent=2) + "\n",
            encoding="utf-8",
        )
        logger.info("Saved config file %s", self.path)
        # Only update in-memory data once the file has been written
        self._data = data
        self._exists = True
