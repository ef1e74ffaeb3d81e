"""Change detection: which services a branch's changes affect."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from bosun_flow.settings import Settings

SHARED_KEY = "_shared"


@dataclass
class AffectedResult:
    """The change-detection outcome for a single repository."""

    repo_name: str
    repo_path: str = ""
    branch: str = ""
    has_changes: bool = False
    services: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SummaryLine:
    """One line of the affected-services summary.

    ``kind`` is ``"skip"``, ``"complete"`` or ``"item"``; items carry a
    ``label`` such as ``"deploy"`` or ``"skip"``.
    """

    kind: str
    text: str
    label: str = ""


def any_path_matches(changed: Iterable[str] | None, prefixes: Sequence[str] | None) -> bool:
    """Report whether any changed file matches any path prefix.

    A prefix ending in ``/`` matches every file below that directory; any
    other prefix matches only the exact file path.
    """
    prefix_list = list(prefixes or ())
    for path in changed or ():
        for prefix in prefix_list:
            if prefix.endswith("/"):
                if path.startswith(prefix):
                    return True
            elif path == prefix:
                return True
    return False


def match_service_paths(
    repo_name: str,
    services: Sequence[str],
    changed: Sequence[str],
    path_map: Mapping[str, Sequence[str]],
) -> AffectedResult:
    """Match changed files against per-service path prefixes.

    A match on the ``_shared`` prefixes affects every service. Services
    without a path entry are included conservatively.
    """
    shared = path_map.get(SHARED_KEY)
    if shared is not None and any_path_matches(changed, shared):
        return AffectedResult(repo_name=repo_name, has_changes=True, services=list(services))

    affected: list[str] = []
    skipped: list[str] = []
    for service in services:
        prefixes = path_map.get(service)
        if prefixes is None or any_path_matches(changed, prefixes):
            affected.append(service)
        else:
            skipped.append(service)

    return AffectedResult(
        repo_name=repo_name,
        has_changes=bool(affected),
        services=affected,
        skipped=skipped,
    )


def resolve_service_paths(settings: Settings, repo_name: str) -> dict[str, list[str]] | None:
    """Return the per-service path prefixes configured for a repository.

    Returns None unless the repository's services entry uses the map form.
    """
    raw = settings.get(f"services.{repo_name}")
    if not isinstance(raw, dict):
        return None

    paths: dict[str, list[str]] = {}
    for service, value in raw.items():
        if isinstance(value, list):
            strings = [item for item in value if isinstance(item, str)]
            if strings:
                paths[service] = strings
        elif isinstance(value, str):
            paths[service] = [value]
    return paths


def summarize_affected(results: Iterable[AffectedResult]) -> list[SummaryLine]:
    """Describe change-detection results as summary lines."""
    lines: list[SummaryLine] = []
    for result in results:
        if not result.has_changes and result.skipped:
            lines.append(
                SummaryLine(
                    "skip",
                    f"{result.repo_name}: no changes, skipping ({', '.join(result.skipped)})",
                )
            )
            continue
        if result.skipped:
            total = len(result.services) + len(result.skipped)
            lines.append(
                SummaryLine(
                    "complete",
                    f"{result.repo_name}: {len(result.services)} of {total} services affected",
                )
            )
            lines.extend(SummaryLine("item", s, "deploy") for s in result.services)
            lines.extend(SummaryLine("item", s, "skip") for s in result.skipped)
        elif result.services:
            lines.append(
                SummaryLine(
                    "complete",
                    f"{result.repo_name}: all services affected ({', '.join(result.services)})",
                )
            )
    return lines