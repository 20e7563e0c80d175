"""Tests for pawprint.config_loader — pawprint.toml / pawprint.yaml loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from pawprint._errors import ConfigError
from pawprint.config_loader import (
    find_config_file,
    load_config,
    read_config_file,
    validate_options,
)


class TestLoadConfig:
    """load_config — file values merged with overrides."""

    def test_no_config_file(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)
        assert config.root == tmp_path
        assert config.port == 3000

    def test_toml_section(self, tmp_path: Path) -> None:
        (tmp_path / "pawprint.toml").write_text(
            '[pawprint]\nport = 4000\npublic = "dist"\nwatch = "static/*"\n'
            '\n[pawprint.esbuild]\nsourcemap = true\n\n[pawprint.env]\nAPI = "/api"\n'
        )
        config = load_config(tmp_path)
        assert config.port == 4000
        assert config.outdir == "dist"
        assert config.watch == ("static/*",)
        assert config.esbuild == {"sourcemap": True}
        assert config.env == {"API": "/api"}

    def test_toml_top_level(self, tmp_path: Path) -> None:
        (tmp_path / "pawprint.toml").write_text("autoroute = false\n")
        assert load_config(tmp_path).autoroute is False

    def test_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "pawprint.yaml").write_text(
            "template_ext: ma\nwatch:\n  - static/*\n  - '*.md'\n"
        )
        config = load_config(tmp_path)
        assert config.template_ext == ".ma"
        assert config.watch == ("static/*", "*.md")

    def test_empty_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "pawprint.yml").write_text("")
        assert load_config(tmp_path).port == 3000

    def test_overrides_win(self, tmp_path: Path) -> None:
        (tmp_path / "pawprint.toml").write_text("port = 4000\nhost = '0.0.0.0'\n")
        config = load_config(tmp_path, port=5000, host=None)
        assert config.port == 5000
        assert config.host == "0.0.0.0"

    def test_toml_preferred(self, tmp_path: Path) -> None:
        (tmp_path / "pawprint.toml").write_text("port = 4000\n")
        (tmp_path / "pawprint.yaml").write_text("port: 5000\n")
        assert find_config_file(tmp_path) == tmp_path / "pawprint.toml"
        assert load_config(tmp_path).port == 4000


class TestConfigFileErrors:
    """Malformed files."""

    def test_bad_toml(self, tmp_path: Path) -> None:
        (tmp_path / "pawprint.toml").write_text("port = \n")
        with pytest.raises(ConfigError, match="Failed to parse pawprint.toml"):
            read_config_file(tmp_path)

    def test_bad_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "pawprint.yaml").write_text("port: [\n")
        with pytest.raises(ConfigError, match="Failed to parse pawprint.yaml"):
            read_config_file(tmp_path)

    def test_yaml_not_mapping(self, tmp_path: Path) -> None:
        (tmp_path / "pawprint.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            read_config_file(tmp_path)

    def test_section_not_table(self, tmp_path: Path) -> None:
        (tmp_path / "pawprint.toml").write_text('pawprint = "yes"\n')
        with pytest.raises(ConfigError, match="section"):
            read_config_file(tmp_path)


class TestValidateOptions:
    """validate_options — keys and types."""

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="unknown option 'prot'"):
            validate_options({"prot": 3000})

    def test_wrong_type(self) -> None:
        with pytest.raises(ConfigError, match="'port' must be an integer"):
            validate_options({"port": "3000"})

    def test_bool_is_not_int(self) -> None:
        with pytest.raises(ConfigError, match="'port'"):
            validate_options({"port": True})

    def test_port_range(self) -> None:
        with pytest.raises(ConfigError, match="between 1 and 65535"):
            validate_options({"port": 70000})

    def test_debounce_positive(self) -> None:
        with pytest.raises(ConfigError, match="debounce_ms"):
            validate_options({"debounce_ms": 0})

    def test_watch_type(self) -> None:
        with pytest.raises(ConfigError, match="'watch'"):
            validate_options({"watch": [1, 2]})

    def test_esbuild_must_be_table(self) -> None:
        with pytest.raises(ConfigError, match="'esbuild'"):
            validate_options({"esbuild": "minify"})

    def test_env_values(self) -> None:
        assert validate_options({"env": {"DEBUG": True, "N": 3}}) == {
            "env": {"DEBUG": True, "N": 3}
        }
        with pytest.raises(ConfigError, match="env value 'X'"):
            validate_options({"env": {"X": [1]}})

    def test_source_in_message(self) -> None:
        with pytest.raises(ConfigError, match="^pawprint.yaml: "):
            validate_options({"nope": 1}, source="pawprint.yaml")

    def test_public_alias(self) -> None:
        assert validate_options({"public": "www"}) == {"outdir": "www"}
