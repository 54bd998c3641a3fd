"""Tests for config loading and saving."""

import stat
from pathlib import Path

import pytest

from fedi_client.config import AppConfig, config_exists, load_config, save_config


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.toml"


class TestConfig:
    def test_round_trip(self, config_path, tmp_path):
        config = AppConfig(
            server="example.social",
            store_path=tmp_path / "store.json",
            page_limit=5,
            smart_paging=False,
            timeout=10.0,
        )
        save_config(config, config_path)

        assert config_exists(config_path)
        assert load_config(config_path) == config

    def test_file_is_private(self, config_path):
        save_config(AppConfig(server="example.social"), config_path)
        assert stat.S_IMODE(config_path.stat().st_mode) == 0o600

    def test_defaults(self, config_path):
        config_path.write_text('[server]\nname = "example.social"\n')

        config = load_config(config_path)

        assert config.page_limit == 20
        assert config.smart_paging is True
        assert config.timeout == 30.0

    def test_store_path_is_expanded(self, config_path):
        config_path.write_text(
            '[server]\nname = "example.social"\n[store]\npath = "~/fedi/store.json"\n'
        )
        assert load_config(config_path).store_path == Path.home() / "fedi" / "store.json"

    def test_missing_file(self, config_path):
        assert not config_exists(config_path)
        with pytest.raises(FileNotFoundError):
            load_config(config_path)

    def test_missing_server(self, config_path):
        config_path.write_text("[fetch]\nlimit = 10\n")
        with pytest.raises(ValueError, match="server.name"):
            load_config(config_path)

    def test_non_positive_limit(self, config_path):
        config_path.write_text('[server]\nname = "example.social"\n[fetch]\nlimit = 0\n')
        with pytest.raises(ValueError, match="fetch.limit"):
            load_config(config_path)
