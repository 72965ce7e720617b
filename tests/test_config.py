import datetime
import json
from pathlib import Path

import pytest
import time_machine

from lsbranch.config import (
    CONFIG_ENV_VAR,
    ConfigError,
    ConfigStore,
    RepoRef,
    resolve_config_path,
)

NOW = datetime.datetime(2024, 6, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)


def _write_config(path: Path, data: dict) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestResolveConfigPath:
    def test_flag_overrides_everything(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.json"))

        assert resolve_config_path(tmp_path / "flag.json") == tmp_path / "flag.json"

    def test_env_overrides_default(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.json"))

        assert resolve_config_path(None) == tmp_path / "env.json"

    def test_default(self, tmp_path, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))

        path = resolve_config_path(None)

        assert path == tmp_path.resolve() / ".lsbranchrc.json"
        assert ConfigStore(path).is_default_path

    def test_relative_flag_is_made_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert resolve_config_path(Path("config.json")) == tmp_path.resolve() / "config.json"


class TestRepoRef:
    def test_display_name(self):
        assert RepoRef(path="/code/a", alias="a").display_name == "a"
        assert RepoRef(path="/code/a").display_name == "/code/a"


class TestConfigStore:
    def test_missing_file(self, tmp_path):
        store = ConfigStore(tmp_path / "config.json")

        assert not store.exists()
        assert store.get_repos() == []
        assert store.validate() == []
        assert not store.is_default_path

    def test_load(self, tmp_path):
        path = _write_config(
            tmp_path / "config.json",
            {
                "lastUpdateCheck": "2024-06-01T12:00:00Z",
                "repos": [{"path": "/code/a", "alias": "a"}, {"path": "/code/b"}],
            },
        )
        store = ConfigStore(path)

        assert store.exists()
        assert store.get_repos() == [
            RepoRef(path="/code/a", alias="a"),
            RepoRef(path="/code/b"),
        ]

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError):
            ConfigStore(path).get_repos()

    @pytest.mark.parametrize(
        "data",
        [
            {"repos": [{"alias": "no-path"}]},
            {"repos": [{"path": "/code/a", "unknown": 1}]},
            {"repos": [], "extra": True},
            {"repos": "not-a-list"},
        ],
    )
    def test_schema_errors(self, tmp_path, data):
        path = _write_config(tmp_path / "config.json", data)

        with pytest.raises(ConfigError):
            ConfigStore(path).get_repos()

    def test_validate_duplicates(self, tmp_path):
        path = _write_config(
            tmp_path / "config.json",
            {
                "repos": [
                    {"path": "/code/a", "alias": "x"},
                    {"path": "/code/a"},
                    {"path": "/code/b", "alias": "x"},
                    {"path": "/code/c"},
                ]
            },
        )

        assert ConfigStore(path).validate() == [
            'Repo path "/code/a" is specified multiple times.',
            'Repo alias "x" is specified multiple times.',
        ]

    def test_add_repo_creates_file(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        store = ConfigStore(path)

        store.add_repo(RepoRef(path="/code/a", alias="a"))
        store.add_repo(RepoRef(path="/code/b"))

        assert store.exists()
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["repos"] == [{"path": "/code/a", "alias": "a"}, {"path": "/code/b"}]
        assert "lastUpdateCheck" in data
        assert ConfigStore(path).get_repos() == store.get_repos()

    def test_add_duplicate_repo(self, tmp_path):
        path = _write_config(
            tmp_path / "config.json", {"repos": [{"path": "/code/a", "alias": "a"}]}
        )
        store = ConfigStore(path)

        with pytest.raises(ConfigError, match='Repo path "/code/a" already exists'):
            store.add_repo(RepoRef(path="/code/a"))
        with pytest.raises(ConfigError, match='Repo alias "a" already exists'):
            store.add_repo(RepoRef(path="/code/other", alias="a"))

        assert store.get_repos() == [RepoRef(path="/code/a", alias="a")]

    def test_failed_save_keeps_data(self, tmp_path, monkeypatch):
        path = _write_config(tmp_path / "config.json", {"repos": []})
        store = ConfigStore(path)

        def write_text(*args, **kwargs):
            raise PermissionError("read-only")

        monkeypatch.setattr(Path, "write_text", write_text)

        with pytest.raises(PermissionError):
            store.add_repo(RepoRef(path="/code/a"))

        assert store.get_repos() == []


class TestUpdateCheckTimestamp:
    def test_never_checked(self, tmp_path):
        store = ConfigStore(_write_config(tmp_path / "config.json", {"repos": []}))

        assert store.should_check_for_updates(NOW)

    def test_checked_recently(self, tmp_path):
        store = ConfigStore(_write_config(tmp_path / "config.json", {"repos": []}))
        store.set_last_update_check(NOW)

        assert not store.should_check_for_updates(NOW + datetime.timedelta(hours=23))
        assert store.should_check_for_updates(NOW + datetime.timedelta(hours=25))

    def test_timestamp_is_persisted(self, tmp_path):
        path = _write_config(tmp_path / "config.json", {"repos": [{"path": "/a"}]})
        ConfigStore(path).set_last_update_check(NOW)

        store = ConfigStore(path)

        assert not store.should_check_for_updates(NOW)
        assert store.get_repos() == [RepoRef(path="/a")]

    @time_machine.travel(NOW, tick=False)
    def test_missing_file_counts_as_just_checked(self, tmp_path):
        store = ConfigStore(tmp_path / "config.json")

        assert not store.should_check_for_updates(NOW + datetime.timedelta(hours=1))
        assert store.should_check_for_updates(NOW + datetime.timedelta(days=2))
