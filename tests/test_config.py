"""Tests for user-level configuration."""

import json

import pytest

from interactgen import config as config_module
from interactgen.config import (
    GenerationDefaults,
    InteractgenConfig,
    configure,
    get_config,
    reset_config,
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_dir / "config.json")
    for name in GenerationDefaults.__dataclass_fields__:
        monkeypatch.delenv(config_module.ENV_PREFIX + name.upper(), raising=False)
    reset_config()
    yield config_dir / "config.json"
    reset_config()


class TestLoad:
    def test_hardcoded_defaults(self):
        config = InteractgenConfig.load()
        assert config.defaults.num_ints == 350
        assert config.defaults.max_depth == 10
        assert config.defaults.min_symbols == 100
        assert config.defaults.seed == 0
        assert config.defaults.output_folder == "gen_ints"
        assert config.defaults.probas == "default"
        assert config.defaults.retry_multiplier == 100
        assert config.defaults.plugin == ""

    def test_file_values(self, isolated_config):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(
            json.dumps({"defaults": {"num_ints": "20", "probas": "conservative", "bogus": 1}})
        )
        config = InteractgenConfig.load()
        assert config.defaults.num_ints == 20
        assert config.defaults.probas == "conservative"

    def test_corrupt_file_is_ignored(self, isolated_config, caplog):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("{not json")
        with caplog.at_level("WARNING"):
            config = InteractgenConfig.load()
        assert config.defaults.num_ints == 350
        assert "Failed to load config" in caplog.text

    def test_env_overrides_file(self, isolated_config, monkeypatch):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(json.dumps({"defaults": {"seed": 5}}))
        monkeypatch.setenv("INTERACTGEN_SEED", "9")
        monkeypatch.setenv("INTERACTGEN_PLUGIN", "mylang.plugin:PLUGIN")
        config = InteractgenConfig.load()
        assert config.defaults.seed == 9
        assert config.defaults.plugin == "mylang.plugin:PLUGIN"

    def test_invalid_env_int_ignored(self, monkeypatch, caplog):
        monkeypatch.setenv("INTERACTGEN_NUM_INTS", "many")
        with caplog.at_level("WARNING"):
            config = InteractgenConfig.load()
        assert config.defaults.num_ints == 350
        assert "INTERACTGEN_NUM_INTS" in caplog.text


class TestSave:
    def test_round_trip(self, isolated_config):
        config = InteractgenConfig(defaults=GenerationDefaults(num_ints=12, seed=3))
        config.save()
        assert isolated_config.exists()
        loaded = InteractgenConfig.load()
        assert loaded.defaults.num_ints == 12
        assert loaded.defaults.seed == 3
        assert loaded.to_dict() == config.to_dict()


class TestSingleton:
    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_configure_and_reset(self):
        custom = InteractgenConfig(defaults=GenerationDefaults(min_symbols=4))
        configure(custom)
        assert get_config() is custom
        reset_config()
        assert get_config() is not custom
