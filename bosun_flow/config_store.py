"""Reading and writing keys in a single YAML configuration file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml

from bosun_flow.settings import Settings

CONFIG_FILE = "config.yaml"
PROJECT_DIR = ".bosun"


class ConfigPathError(RuntimeError):
    """No configuration file location could be determined."""


def resolve_config_path(
    is_global: bool,
    project_root: str | os.PathLike[str] | None,
    global_dir: str | os.PathLike[str] | None,
) -> Path:
    """Return the configuration file to write to.

    The global directory is created when needed.
    """
    if is_global:
        if not global_dir:
            raise ConfigPathError("finding config directory: no global config directory")
        directory = Path(global_dir)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigPathError(f"creating config directory: {exc}") from exc
        return directory / CONFIG_FILE

    if not project_root:
        raise ConfigPathError("not inside a bosun project (use --global for global config)")
    return Path(project_root) / PROJECT_DIR / CONFIG_FILE


def _dump(data: Any) -> str:
    return yaml.safe_dump(data, sort_keys=True, default_flow_style=False, allow_unicode=True)


def _store(path: str | os.PathLike[str], key: str, value: Any) -> None:
    try:
        settings = Settings().load(path)
    except (OSError, yaml.YAMLError, ValueError):
        settings = Settings()
    settings.set(key, value)
    Path(path).write_text(_dump(settings.all_settings()), encoding="utf-8")


def set_config_value(path: str | os.PathLike[str], key: str, value: str) -> None:
    """Set a dotted key to a string value in the file at ``path``."""
    _store(path, key, value)


def set_config_map(path: str | os.PathLike[str], key: str, values: Mapping[str, str]) -> None:
    """Set a dotted key to a mapping in the file at ``path``."""
    _store(path, key, dict(values))


def set_config_list_value(path: str | os.PathLike[str], key: str, values: Sequence[str]) -> None:
    """Set a dotted key to a list in the file at ``path``."""
    _store(path, key, list(values))


def unset_config_value(path: str | os.PathLike[str], key: str) -> bool:
    """Remove a dotted key from the file at ``path``.

    Returns True when the key was found and removed.
    """
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return False

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ValueError(f"parsing config: {exc}") from exc
    if data is None:
        return False
    if not isinstance(data, dict):
        raise ValueError("parsing config: configuration must be a mapping")

    *parents, leaf = key.split(".")
    node = data
    for segment in parents:
        child = node.get(segment)
        if not isinstance(child, dict):
            return False
        node = child

    if leaf not in node:
        return False
    del node[leaf]

    file_path.write_text(_dump(data), encoding="utf-8")
    return True