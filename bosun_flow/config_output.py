"""Rendering of the effective configuration for people and machines."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Iterable, Mapping

from bosun_flow.settings import (
    ConfigSources,
    Settings,
    Source,
    env_var_for_key,
    flatten_map,
    format_scalar,
)

GLYPH_DEFAULT = "◻︎"
GLYPH_GLOBAL = "◼︎"
GLYPH_PROJECT = "◆"
GLYPH_ENV = "▲"

OUTPUT_FORMATS = ("yaml", "json", "env")


class UnknownGroupError(KeyError):
    """The requested configuration group does not exist."""

    def __init__(self, group: str) -> None:
        super().__init__(group)
        self.group = group

    def __str__(self) -> str:
        return f'unknown group "{self.group}"'


def format_value(value: str) -> str:
    """Turn a bracketed list rendering such as ``[a b c]`` into ``a, b, c``."""
    if value.startswith("[") and value.endswith("]") and len(value) >= 2:
        inner = value[1:-1]
        if inner:
            return inner.replace(" ", ", ")
    return value


def matches_source_filter(source: str | Source | None, filters: Iterable[str] | None) -> bool:
    """Report whether ``source`` passes the filter; an empty filter passes all."""
    wanted = list(filters or ())
    if not wanted:
        return True
    name = "" if source is None else str(source.value if isinstance(source, Source) else source)
    return name in wanted


def short_path(path: str, home: str | None = None) -> str:
    """Replace a leading home directory in ``path`` with ``~``."""
    if home is None:
        try:
            home = str(Path.home())
        except (RuntimeError, KeyError):
            return path
    if home and path.startswith(home):
        return "~" + path[len(home):]
    return path


def source_glyph(source: str | Source | None) -> tuple[str, str]:
    """Return the glyph and palette role that mark a configuration source."""
    name = "" if source is None else str(source.value if isinstance(source, Source) else source)
    if name == Source.GLOBAL.value:
        return GLYPH_GLOBAL, "primary"
    if name == Source.PROJECT.value:
        return GLYPH_PROJECT, "success"
    if name == Source.ENV.value:
        return GLYPH_ENV, "warning"
    return GLYPH_DEFAULT, "muted"


def _yaml_lines(mapping: Mapping[str, Any], indent: int) -> Iterable[str]:
    prefix = "  " * indent
    for key in sorted(mapping):
        value = mapping[key]
        if isinstance(value, Mapping):
            yield f"{prefix}{key}:"
            yield from _yaml_lines(value, indent + 1)
        else:
            yield f"{prefix}{key}: {format_scalar(value)}"


def render_yaml(settings: Mapping[str, Any]) -> str:
    """Render settings as simple indented YAML with sorted keys."""
    return "".join(line + "\n" for line in _yaml_lines(settings, 0))


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _json_value(value: Any, indent: int) -> str:
    prefix = "  " * indent
    if isinstance(value, Mapping):
        keys = sorted(value)
        entries = [
            f"{prefix}  {_quote(str(k))}: {_json_value(value[k], indent + 1)}" for k in keys
        ]
        return "{\n" + "".join(e + ",\n" for e in entries[:-1]) + (
            entries[-1] + "\n" if entries else ""
        ) + f"{prefix}}}"
    if isinstance(value, (list, tuple)):
        entries = [f"{prefix}  {_json_value(item, indent + 1)}" for item in value]
        return "[\n" + "".join(e + ",\n" for e in entries[:-1]) + (
            entries[-1] + "\n" if entries else ""
        ) + f"{prefix}]"
    if isinstance(value, str):
        return _quote(value)
    return format_scalar(value)


def render_json(settings: Mapping[str, Any]) -> str:
    """Render settings as indented JSON with sorted keys."""
    return _json_value(settings, 0) + "\n"


def render_env(settings: Mapping[str, Any]) -> str:
    """Render settings as ``BOSUN_*`` environment assignments, sorted by key."""
    flat = flatten_map("", settings)
    return "".join(f"{env_var_for_key(k)}={flat[k]}\n" for k in sorted(flat))


def render_machine(
    settings: Settings | Mapping[str, Any],
    sources: ConfigSources | None = None,
    output_format: str = "yaml",
    source_filter: Iterable[str] | None = None,
    group_filter: str = "",
    environ: Mapping[str, str] | None = None,
) -> str:
    """Render the effective configuration in a machine-readable format.

    ``group_filter`` narrows to one top-level group; ``source_filter``
    keeps only keys whose value comes from one of the named tiers.
    """
    data = settings.all_settings() if isinstance(settings, Settings) else dict(settings)
    env = os.environ if environ is None else environ

    if group_filter:
        if group_filter not in data:
            raise UnknownGroupError(group_filter)
        data = {group_filter: data[group_filter]}

    filters = list(source_filter or ())
    if filters:
        attribution = sources if sources is not None else ConfigSources()
        data = {
            key: value
            for key, value in flatten_map("", data).items()
            if matches_source_filter(attribution.resolve_key_source(key, env)[1], filters)
        }

    if output_format == "yaml":
        return render_yaml(data)
    if output_format == "json":
        return render_json(data)
    if output_format == "env":
        return render_env(data)
    raise ValueError(f'unknown output format "{output_format}" (valid: yaml, json, env)')