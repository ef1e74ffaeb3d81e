"""Layered configuration values addressed by dot-separated keys."""

from __future__ import annotations

import copy
import math
import os
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import yaml

ENV_PREFIX = "BOSUN_"


def _normalize(value: Any) -> Any:
    """Lower-case mapping keys recursively, as keys are case-insensitive."""
    if isinstance(value, Mapping):
        return {str(k).lower(): _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value


def format_scalar(value: Any) -> str:
    """Render a configuration value the way the command line shows it."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "+Inf" if value > 0 else "-Inf"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(format_scalar(v) for v in value) + "]"
    if isinstance(value, Mapping):
        items = " ".join(f"{k}:{format_scalar(value[k])}" for k in sorted(value, key=str))
        return "map[" + items + "]"
    return str(value)


def env_var_for_key(key: str) -> str:
    """Return the automatic environment variable name for a dotted key."""
    return ENV_PREFIX + key.replace(".", "_").upper()


def flatten_map(prefix: str, mapping: Mapping[str, Any]) -> dict[str, str]:
    """Flatten a nested mapping into dot-separated keys with string values."""
    result: dict[str, str] = {}
    for k, v in mapping.items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, Mapping):
            result.update(flatten_map(key, v))
        else:
            result[key] = format_scalar(v)
    return result


class Settings:
    """A nested configuration store with case-insensitive dotted keys."""

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = _normalize(data or {})

    def load(self, path: str | os.PathLike[str]) -> "Settings":
        """Replace the contents with the YAML mapping stored at ``path``."""
        with open(path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, Mapping):
            raise ValueError(f"{path}: configuration must be a mapping")
        self._data = _normalize(loaded)
        return self

    def get(self, key: str) -> Any:
        """Return the value at ``key`` or None when it is not set."""
        node: Any = self._data
        for part in key.lower().split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return copy.deepcopy(node)

    def get_string(self, key: str) -> str:
        """Return the value at ``key`` as text, or an empty string."""
        value = self.get(key)
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return format_scalar(value)

    def get_string_list(self, key: str) -> list[str]:
        """Return the value at ``key`` as a list of strings."""
        value = self.get(key)
        if value is None:
            return []
        if isinstance(value, list):
            return [v if isinstance(v, str) else format_scalar(v) for v in value]
        if isinstance(value, str):
            return value.split()
        return [format_scalar(value)]

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` at ``key``, creating intermediate groups."""
        *parents, leaf = key.lower().split(".")
        node = self._data
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[leaf] = _normalize(value)

    def is_set(self, key: str) -> bool:
        """Report whether ``key`` holds a value."""
        return self.get(key) is not None

    def all_settings(self) -> dict[str, Any]:
        """Return a copy of every stored value."""
        return copy.deepcopy(self._data)


class Source(str, Enum):
    """The tier a configuration value comes from."""

    DEFAULT = "default"
    GLOBAL = "global"
    PROJECT = "project"
    ENV = "env"


def _read_quietly(path: Path | None) -> Settings | None:
    if path is None:
        return None
    try:
        return Settings().load(path)
    except (OSError, yaml.YAMLError, ValueError):
        return Settings()


class ConfigSources:
    """Global and project configuration read separately for attribution."""

    def __init__(
        self,
        global_path: str | os.PathLike[str] | None = None,
        project_path: str | os.PathLike[str] | None = None,
    ) -> None:
        self.global_path = Path(global_path) if global_path else None
        self.project_path = Path(project_path) if project_path else None
        self.global_settings = _read_quietly(self.global_path)
        self.project_settings = _read_quietly(self.project_path)

    def resolve_key_source(
        self, key: str, environ: Mapping[str, str] | None = None
    ) -> tuple[str, Source | None]:
        """Return the effective value of ``key`` and the tier it comes from."""
        env = os.environ if environ is None else environ
        from_env = env.get(env_var_for_key(key), "")
        if from_env:
            return from_env, Source.ENV
        tiers = (
            (self.project_settings, Source.PROJECT),
            (self.global_settings, Source.GLOBAL),
        )
        for settings, source in tiers:
            if settings is not None and settings.is_set(key):
                return format_scalar(settings.get(key)), source
        return "", None