"""Load ToolchainConfig from pawprint.toml / pawprint.yaml if present.

Merges file config with CLI kwargs. CLI overrides file. Unlike an
executable config module, the file is plain data: every key is validated
and unknown keys are rejected, with ``esbuild`` as the only pass-through.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path

import yaml

from pawprint._errors import ConfigError
from pawprint.config import ToolchainConfig

CONFIG_FILENAMES: tuple[str, ...] = ("pawprint.toml", "pawprint.yaml", "pawprint.yml")

# key -> accepted python type(s)
_SCALAR_KEYS: dict[str, type | tuple[type, ...]] = {
    "host": str,
    "port": int,
    "outdir": str,
    "src_dir": str,
    "entry": str,
    "template_ext": str,
    "autoroute": bool,
    "debounce_ms": int,
    "node": str,
    "esbuild_binary": str,
}

# Aliases accepted in the config file, mapped to the field they set.
_ALIASES: dict[str, str] = {"public": "outdir"}


def load_config(root: Path, **overrides: object) -> ToolchainConfig:
    """Load ToolchainConfig from root, optionally merging a config file.

    Looks for pawprint.toml, pawprint.yaml or pawprint.yml in root. If found,
    loads and validates it, then merges with overrides. Overrides that are
    ``None`` are ignored so CLI defaults never mask file values.

    Raises:
        ConfigError: The config file is malformed or has invalid keys.

    """
    file_config = read_config_file(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    return ToolchainConfig(root=root, **merged)


def find_config_file(root: Path) -> Path | None:
    """Return the first config file present in root, if any."""
    for name in CONFIG_FILENAMES:
        path = root / name
        if path.is_file():
            return path
    return None


def read_config_file(root: Path) -> dict[str, object]:
    """Read and validate the config file in root. Empty dict if absent."""
    path = find_config_file(root)
    if path is None:
        return {}
    if path.suffix == ".toml":
        data = _parse_toml(path)
    else:
        data = _parse_yaml(path)
    section = data.get("pawprint", data)
    if not isinstance(section, Mapping):
        msg = f"{path.name}: the [pawprint] section must be a table"
        raise ConfigError(msg)
    return validate_options(section, source=path.name)


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse {path.name}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path.name}: top level must be a mapping"
        raise ConfigError(msg)
    return data


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Failed to parse {path.name}: {exc}"
        raise ConfigError(msg) from exc


def validate_options(
    options: Mapping[str, object], *, source: str = "config"
) -> dict[str, object]:
    """Validate raw config options and normalise them to ToolchainConfig kwargs.

    Raises:
        ConfigError: On unknown keys or values of the wrong type.

    """
    result: dict[str, object] = {}
    for raw_key, value in options.items():
        key = _ALIASES.get(raw_key, raw_key)

        if key in _SCALAR_KEYS:
            expected = _SCALAR_KEYS[key]
            # bool is an int subclass; reject it where an int is expected
            if not isinstance(value, expected) or (
                expected is int and isinstance(value, bool)
            ):
                msg = f"{source}: {raw_key!r} must be {_type_name(expected)}"
                raise ConfigError(msg)
            result[key] = value
        elif key == "watch":
            result[key] = _validate_patterns(value, source)
        elif key == "esbuild":
            if not isinstance(value, Mapping):
                msg = f"{source}: 'esbuild' must be a table of bundler options"
                raise ConfigError(msg)
            result[key] = dict(value)
        elif key == "env":
            result[key] = _validate_env(value, source)
        else:
            msg = f"{source}: unknown option {raw_key!r}"
            raise ConfigError(msg)

    port = result.get("port")
    if isinstance(port, int) and not 0 < port < 65536:
        msg = f"{source}: 'port' must be between 1 and 65535"
        raise ConfigError(msg)
    debounce = result.get("debounce_ms")
    if isinstance(debounce, int) and debounce < 1:
        msg = f"{source}: 'debounce_ms' must be at least 1"
        raise ConfigError(msg)
    ext = result.get("template_ext")
    if isinstance(ext, str) and not ext.startswith("."):
        result["template_ext"] = "." + ext
    return result


def _validate_patterns(value: object, source: str) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(value)
    msg = f"{source}: 'watch' must be a pattern or a list of patterns"
    raise ConfigError(msg)


def _validate_env(value: object, source: str) -> dict[str, object]:
    if not isinstance(value, Mapping):
        msg = f"{source}: 'env' must be a table of name = value pairs"
        raise ConfigError(msg)
    env: dict[str, object] = {}
    for name, item in value.items():
        if not isinstance(item, str | int | float | bool) and item is not None:
            msg = f"{source}: env value {name!r} must be a string, number or boolean"
            raise ConfigError(msg)
        env[str(name)] = item
    return env


def _type_name(expected: type | tuple[type, ...]) -> str:
    if isinstance(expected, tuple):
        return " or ".join(t.__name__ for t in expected)
    return {"str": "a string", "int": "an integer", "bool": "a boolean"}.get(
        expected.__name__, expected.__name__
    )
