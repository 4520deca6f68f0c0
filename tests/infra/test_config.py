"""
Tests for supervisor configuration.
"""

import pytest

from respawner.config import (
    DEFAULT_COMMAND,
    DEFAULT_GRACE_PERIOD,
    DEFAULT_GRACE_POLL,
    DEFAULT_INTERVAL,
    DEFAULT_TRIGGER_FILE,
    MAX_CONFIG_SIZE_BYTES,
    SupervisorConfig,
    load_config,
)
from respawner.exceptions import ConfigError


@pytest.mark.unit
class TestSupervisorConfig:
    def test_defaults(self):
        config = SupervisorConfig()
        assert config.trigger_file == DEFAULT_TRIGGER_FILE == "./trigger"
        assert config.command == DEFAULT_COMMAND == "sleep 10"
        assert config.cycles is None
        assert config.interval == DEFAULT_INTERVAL == 0.5
        assert config.grace_period == DEFAULT_GRACE_PERIOD == 3.0
        assert config.grace_poll == DEFAULT_GRACE_POLL == 0.1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"cycles": -1},
            {"cycles": True},
            {"interval": 0},
            {"grace_period": -0.1},
            {"grace_poll": 0},
            {"command": "   "},
            {"trigger_file": ""},
        ],
    )
    def test_invalid_values_raise(self, kwargs):
        with pytest.raises(ConfigError):
            SupervisorConfig(**kwargs)

    def test_zero_cycles_allowed(self):
        assert SupervisorConfig(cycles=0).cycles == 0

    def test_replace_ignores_none(self):
        config = SupervisorConfig(command="true").replace(command=None, cycles=3)
        assert config.command == "true"
        assert config.cycles == 3

    def test_from_config(self):
        raw = {
            "supervisor": {
                "trigger_file": "/tmp/restart",
                "command": "exec myapp",
                "cycles": 5,
                "interval": 1,
                "grace_period": 2.5,
            }
        }
        config = SupervisorConfig.from_config(raw)
        assert config.trigger_file == "/tmp/restart"
        assert config.command == "exec myapp"
        assert config.cycles == 5
        assert config.interval == 1.0
        assert config.grace_period == 2.5
        assert config.grace_poll == DEFAULT_GRACE_POLL

    def test_from_config_missing_section(self):
        assert SupervisorConfig.from_config({}) == SupervisorConfig()

    def test_from_config_unknown_key(self):
        with pytest.raises(ConfigError, match="unknown"):
            SupervisorConfig.from_config({"supervisor": {"restart_delay": 1}})

    def test_from_config_non_numeric_interval(self):
        with pytest.raises(ConfigError, match="interval"):
            SupervisorConfig.from_config({"supervisor": {"interval": "fast"}})

    def test_from_config_non_integer_cycles(self):
        with pytest.raises(ConfigError, match="cycles"):
            SupervisorConfig.from_config({"supervisor": {"cycles": 1.5}})

    @pytest.mark.parametrize("key", ["trigger_file", "command"])
    @pytest.mark.parametrize("value", [None, 10, ["sleep", "10"]])
    def test_from_config_non_string_path_or_command(self, key, value):
        with pytest.raises(ConfigError, match=f"{key} must be a string"):
            SupervisorConfig.from_config({"supervisor": {key: value}})

    def test_from_config_section_not_mapping(self):
        with pytest.raises(ConfigError):
            SupervisorConfig.from_config({"supervisor": ["a"]})


@pytest.mark.unit
class TestLoadConfig:
    def test_loads_mapping(self, temp_dir):
        path = temp_dir / "respawner.yaml"
        path.write_text("supervisor:\n  command: exec myapp\nlogging:\n  level: debug\n")
        raw = load_config(path)
        assert raw == {
            "supervisor": {"command": "exec myapp"},
            "logging": {"level": "debug"},
        }

    def test_empty_file(self, temp_dir):
        path = temp_dir / "empty.yaml"
        path.write_text("")
        assert load_config(path) == {}

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(temp_dir / "missing.yaml")

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "bad.yaml"
        path.write_text("supervisor: [unclosed\n")
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config(path)

    def test_non_mapping_top_level(self, temp_dir):
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_unsafe_tags_rejected(self, temp_dir):
        path = temp_dir / "unsafe.yaml"
        path.write_text("supervisor: !!python/object/apply:os.system ['true']\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_oversized_file(self, temp_dir, monkeypatch):
        path = temp_dir / "big.yaml"
        path.write_text("a: 1\n")
        monkeypatch.setattr("respawner.config.MAX_CONFIG_SIZE_BYTES", 2)
        with pytest.raises(ConfigError, match="exceeding"):
            load_config(path)
        assert MAX_CONFIG_SIZE_BYTES == 10 * 1024 * 1024
