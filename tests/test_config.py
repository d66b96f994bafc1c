"""Tests for configuration loading."""

import json

import pytest

from metalineage.base import LineageConfig
from metalineage.config import (
    ConfigSourceError,
    ConfigValidationError,
    EnvConfigSource,
    FileConfigSource,
    config_from_dict,
    load_config,
)


class TestEnvConfigSource:
    """Tests for environment variables."""

    def test_parses_known_keys(self):
        source = EnvConfigSource(
            environ={
                "METALINEAGE_MAX_NODES": "500",
                "METALINEAGE_JSON_INDENT": "none",
                "METALINEAGE_LABEL_SEPARATOR": "\\n",
                "METALINEAGE_UNKNOWN": "x",
                "OTHER_MAX_NODES": "1",
            }
        )

        assert source.load() == {
            "max_nodes": 500,
            "json_indent": None,
            "label_separator": "\n",
        }

    def test_non_ascii_values_are_kept(self):
        source = EnvConfigSource(
            environ={
                "METALINEAGE_LABEL_SEPARATOR": " → ",
                "METALINEAGE_NODE_GROUP": "tablas\\ñ",
            }
        )

        assert source.load() == {"label_separator": " → ", "node_group": "tablas\\ñ"}

    def test_escape_sequences(self):
        source = EnvConfigSource(environ={"METALINEAGE_LABEL_SEPARATOR": "\\t"})

        assert source.load() == {"label_separator": "\t"}

    def test_custom_prefix(self):
        source = EnvConfigSource(prefix="LINEAGE", environ={"LINEAGE_LEVEL_SCALE": "3"})

        assert source.load() == {"level_scale": 3}


class TestFileConfigSource:
    """Tests for configuration files."""

    def test_yaml_lineage_section(self, tmp_path):
        path = tmp_path / "metalineage.yaml"
        path.write_text("lineage:\n  max_nodes: 50\n  node_group: datasets\n")

        assert FileConfigSource(path).load() == {"max_nodes": 50, "node_group": "datasets"}

    def test_json_top_level(self, tmp_path):
        path = tmp_path / "metalineage.json"
        path.write_text(json.dumps({"max_field_depth": 8}))

        assert FileConfigSource(path).load() == {"max_field_depth": 8}

    def test_missing_optional_file(self, tmp_path):
        assert FileConfigSource(tmp_path / "absent.yaml").load() == {}

    def test_missing_required_file(self, tmp_path):
        with pytest.raises(ConfigSourceError, match="not found"):
            FileConfigSource(tmp_path / "absent.yaml", required=True).load()

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "metalineage.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigSourceError, match="mapping"):
            FileConfigSource(path).load()

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "metalineage.toml"
        path.write_text("max_nodes = 1\n")

        with pytest.raises(ConfigSourceError, match="Unsupported"):
            FileConfigSource(path).load()


class TestConfigValidation:
    """Tests for value validation."""

    def test_defaults(self):
        assert config_from_dict({}) == LineageConfig()

    @pytest.mark.parametrize(
        "values",
        [
            {"max_nodes": 0},
            {"max_field_depth": -2},
            {"max_nodes": "many"},
            {"level_scale": 0},
            {"json_indent": -1},
            {"node_group": 3},
            {"colour": "red"},
        ],
    )
    def test_invalid_values(self, values):
        with pytest.raises(ConfigValidationError):
            config_from_dict(values)

    def test_collects_all_errors(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            config_from_dict({"max_nodes": 0, "level_scale": 0})

        assert len(exc_info.value.errors) == 2


class TestLoadConfig:
    """Tests for merged loading."""

    def test_environment_only(self):
        config = load_config(environ={"METALINEAGE_MAX_NODES": "10"})

        assert config.max_nodes == 10
        assert config.max_field_depth == 1000

    def test_environment_overrides_file(self, tmp_path):
        path = tmp_path / "metalineage.yaml"
        path.write_text("max_nodes: 50\nlevel_scale: 3\n")

        config = load_config(path, environ={"METALINEAGE_MAX_NODES": "5"})

        assert config.max_nodes == 5
        assert config.level_scale == 3

    def test_given_file_must_exist(self, tmp_path):
        with pytest.raises(ConfigSourceError):
            load_config(tmp_path / "absent.yaml", environ={})
