"""Project initialisation: repository detection and the initial config file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Sequence

PROJECT_DIR = ".bosun"
ROOT_SUFFIX = "(root)"


def _has_git(directory: Path) -> bool:
    return (directory / ".git").exists()


def detect_repositories(directory: str | os.PathLike[str]) -> list[str]:
    """Find git repositories at ``directory`` and among its immediate children.

    The directory itself is reported as ``"<name> (root)"``; children are
    reported by name, in name order. Hidden children are ignored.
    """
    base = Path(directory)
    repositories: list[str] = []

    if _has_git(base):
        repositories.append(f"{base.name} {ROOT_SUFFIX}")

    try:
        entries = sorted(os.scandir(base), key=lambda entry: entry.name)
    except OSError:
        return repositories

    repositories.extend(
        entry.name
        for entry in entries
        if entry.is_dir() and not entry.name.startswith(".") and _has_git(Path(entry.path))
    )
    return repositories


def default_repository_globs(
    directory: str | os.PathLike[str], detected: Iterable[str]
) -> list[str]:
    """Return default repository patterns for what was detected.

    ``.`` stands for the directory itself and ``./*`` for its children.
    """
    globs: list[str] = []
    if _has_git(Path(directory)):
        globs.append(".")
    if any(not name.endswith(ROOT_SUFFIX) for name in detected):
        globs.append("./*")
    return globs


def write_init_config(
    path: str | os.PathLike[str],
    workspace_root: str = "",
    repository_globs: Sequence[str] = (),
) -> None:
    """Write the initial project configuration file to ``path``."""
    lines = [
        "# Repository patterns (globs resolved to directories containing .git/)",
        "repositories:",
    ]
    if repository_globs:
        lines.extend(f"  - {glob}" for glob in repository_globs)
    else:
        lines.append("  # - .          # this directory is a repository")
        lines.append("  # - ./*        # child directories that are repositories")

    if workspace_root:
        lines.append("")
        lines.append("# Where workspaces are created (relative to project root)")
        lines.append(f"workspace_root: {workspace_root}")
    else:
        lines.append("")
        lines.append("# Uncomment to enable worktree-based workspaces:")
        lines.append("# workspace_root: .workspaces")

    lines.extend(
        [
            "",
            "# Uncomment and configure as needed:",
            "# jira:",
            "#   project: PROJ",
            "#",
            "# slack:",
            "#   channel_review: code-review",
            "#   channel_release: releases",
        ]
    )
    Path(path).write_text("\n".join(lines) + "\n", encoding="utf-8")


def find_project_root(start: str | os.PathLike[str] | None = None) -> Path | None:
    """Return the nearest directory at or above ``start`` holding ``.bosun/``."""
    current = Path(start if start is not None else Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / PROJECT_DIR).is_dir():
            return candidate
    return None