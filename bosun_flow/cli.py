"""Command-line entry point: project setup, configuration and diagnostics."""

from __future__ import annotations

import argparse
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Sequence, TextIO

from bosun_flow.branch import build_branch_name
from bosun_flow.config_output import OUTPUT_FORMATS, render_machine
from bosun_flow.config_store import (
    CONFIG_FILE,
    PROJECT_DIR,
    resolve_config_path,
    set_config_list_value,
    set_config_value,
    unset_config_value,
)
from bosun_flow.ephemeral import generate_ephemeral_name
from bosun_flow.project_init import (
    default_repository_globs,
    detect_repositories,
    find_project_root,
    write_init_config,
)
from bosun_flow.settings import ConfigSources, Settings, format_scalar

VERSION = "dev"
BREADCRUMB_SEPARATOR = " › "
CONTEXT_SEPARATOR = " · "


class _NotConfigured(RuntimeError):
    """A service is absent; reported as a warning rather than a failure."""

    def __init__(self) -> None:
        super().__init__("(not configured)")


def command_breadcrumb(segments: Sequence[str]) -> str:
    """Join command titles from root to leaf; the root always reads ``bosun``."""
    titles = list(segments)
    if titles:
        titles[0] = "bosun"
    return BREADCRUMB_SEPARATOR.join(titles)


def check_git() -> str:
    """Return the installed git version, or ``found`` when it cannot be read."""
    if shutil.which("git") is None:
        raise RuntimeError("not found on PATH")
    try:
        completed = subprocess.run(
            ["git", "--version"], capture_output=True, text=True, check=True
        )
    except (OSError, subprocess.CalledProcessError):
        return "found"
    version = completed.stdout.strip()
    prefix = "git version "
    if version.startswith(prefix):
        version = version[len(prefix):]
    return version


def check_branch_template(settings: Settings) -> str:
    """Describe the configured branch template, or ``default`` when unset."""
    return settings.get_string("branch.template") or "default"


# --- configuration locations -------------------------------------------------


def _global_config_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / "bosun"


def _project_config_path(root: Path | None) -> Path | None:
    return root / PROJECT_DIR / CONFIG_FILE if root is not None else None


def _deep_merge(base: dict[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in overlay.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _deep_merge(current, value)
        else:
            base[key] = value
    return base


def _load_settings(global_path: Path, project_path: Path | None) -> Settings:
    merged: dict[str, Any] = {}
    for path in (global_path, project_path):
        if path is not None and path.is_file():
            _deep_merge(merged, Settings().load(path).all_settings())
    return Settings(merged)


def _header(out: TextIO, titles: Sequence[str], *context: str) -> None:
    line = command_breadcrumb(titles)
    if context:
        line += "  " + CONTEXT_SEPARATOR.join(context)
    print(line, file=out)


# --- doctor -------------------------------------------------------------------


def _check_global_config(directory: Path) -> str:
    path = directory / CONFIG_FILE
    if not path.exists():
        raise RuntimeError(f"not found at {path}")
    return str(path)


def _check_project_config(root: Path | None) -> str:
    if root is None:
        raise RuntimeError("no .bosun/ found (run bosun init)")
    path = root / PROJECT_DIR / CONFIG_FILE
    if not path.exists():
        raise RuntimeError(f"not found at {path}")
    return str(path)


def _check_issue_tracker(settings: Settings) -> str:
    provider = settings.get_string("issue_tracker")
    if not provider:
        raise _NotConfigured()
    if provider != "jira":
        raise RuntimeError(f'unsupported: "{provider}"')
    return provider


def _check_notification(settings: Settings) -> str:
    provider = settings.get_string("notification")
    if not provider:
        raise _NotConfigured()
    auth = settings.get_string("slack.auth") or "token"
    detail = f"{provider} (auth: {auth})"
    if auth == "local":
        workspace = settings.get_string("slack.workspace")
        if not workspace:
            raise RuntimeError("slack.workspace not set (required for local auth)")
        detail += f"\nworkspace: {workspace}"
    channels = [
        "#" + channel.removeprefix("#")
        for channel in (
            settings.get_string("slack.channel_review"),
            settings.get_string("slack.channel_release"),
        )
        if channel
    ]
    if channels:
        detail += "\nchannels: " + ", ".join(channels)
    else:
        detail += "\nno channels configured"
    return detail


def _check_cicd(settings: Settings) -> str:
    provider = settings.get_string("cicd")
    if not provider:
        raise _NotConfigured()
    details = [f"provider: {provider}"]
    up = settings.get_string("github_actions.workflows.preview.up.target")
    if up:
        details.append(f"preview up: {up}")
    down = settings.get_string("github_actions.workflows.preview.down.target")
    if down:
        details.append(f"preview down: {down}")
    release = settings.get("github_actions.workflows.release.target")
    if isinstance(release, str):
        details.append(f"release: {release}")
    elif isinstance(release, dict):
        details.append(f"release: {len(release)} repos configured")
    return "\n".join(details)


_Check = tuple[str, bool, Callable[[], str]]


def _run_doctor(out: TextIO) -> int:
    global_dir = _global_config_dir()
    root = find_project_root()
    settings = _load_settings(global_dir / CONFIG_FILE, _project_config_path(root))

    groups: list[tuple[str, list[_Check]]] = [
        (
            "environment",
            [
                ("global config", True, lambda: _check_global_config(global_dir)),
                ("project config", False, lambda: _check_project_config(root)),
                ("git", True, check_git),
            ],
        ),
        ("project", [("branch template", False, lambda: check_branch_template(settings))]),
        (
            "integrations",
            [
                ("issue tracker", False, lambda: _check_issue_tracker(settings)),
                ("notification config", False, lambda: _check_notification(settings)),
            ],
        ),
        ("CI/CD", [("CI/CD config", False, lambda: _check_cicd(settings))]),
    ]

    _header(out, ["bosun", "system check"])
    passed = warned = failed = 0
    for label, checks in groups:
        print(label, file=out)
        for name, required, check in checks:
            try:
                detail = check()
            except _NotConfigured as exc:
                warned += 1
                print(f"  ! {name}: {exc}", file=out)
                continue
            except (RuntimeError, OSError, ValueError) as exc:
                if required:
                    failed += 1
                else:
                    warned += 1
                print(f"  ✗ {name}: {exc}", file=out)
                continue
            passed += 1
            if not detail:
                print(f"  ✓ {name}", file=out)
            elif "\n" in detail:
                print(f"  ✓ {name}", file=out)
                for line in detail.split("\n"):
                    print(f"      {line}", file=out)
            else:
                print(f"  ✓ {name}: {detail}", file=out)

    parts = [f"{passed} passed"]
    if warned:
        parts.append(f"{warned} warnings")
    if failed:
        parts.append(f"{failed} failed")
    print(", ".join(parts), file=out)
    return 0


# --- config -------------------------------------------------------------------


def _split_filters(values: Iterable[str] | None) -> list[str]:
    return [part.strip() for value in values or () for part in value.split(",") if part.strip()]


def _config_show(args: argparse.Namespace, out: TextIO) -> int:
    global_dir = _global_config_dir()
    project_path = _project_config_path(find_project_root())
    global_path = global_dir / CONFIG_FILE
    settings = _load_settings(global_path, project_path)
    sources = ConfigSources(global_path, project_path)
    text = render_machine(
        settings,
        sources,
        args.output or "yaml",
        _split_filters(args.source),
        args.group or "",
    )
    out.write(text)
    return 0


def _config_get(args: argparse.Namespace, out: TextIO) -> int:
    root = find_project_root()
    settings = _load_settings(_global_config_dir() / CONFIG_FILE, _project_config_path(root))
    value = settings.get(args.key)
    if value is None:
        raise KeyError(f'key "{args.key}" not set')
    print(value if isinstance(value, str) else format_scalar(value), file=out)
    return 0


def _config_set(args: argparse.Namespace, out: TextIO) -> int:
    _header(out, ["bosun", "config", "set"], args.key)
    path = resolve_config_path(args.is_global, find_project_root(), _global_config_dir())
    set_config_value(path, args.key, args.value)
    print(f"✓ set {args.key} = {args.value}  ({path})", file=out)
    return 0


def _config_unset(args: argparse.Namespace, out: TextIO) -> int:
    _header(out, ["bosun", "config", "unset"], args.key)
    path = resolve_config_path(args.is_global, find_project_root(), _global_config_dir())
    if not unset_config_value(path, args.key):
        print(f"! {args.key} not set in {path}", file=out)
        return 0
    print(f"✓ removed {args.key}  ({path})", file=out)
    return 0


# --- init ---------------------------------------------------------------------


def _run_init(args: argparse.Namespace, out: TextIO) -> int:
    _header(out, ["bosun", "initialize project"])
    cwd = Path.cwd().resolve()
    bosun_dir = cwd / PROJECT_DIR
    reinit = bosun_dir.exists()

    existing = find_project_root(cwd)
    if existing is not None and existing != cwd:
        raise RuntimeError(
            f"already inside a bosun project at {existing} (nested projects are not supported)"
        )

    globs = _split_filters(args.repositories)
    if not globs and not args.no_detect:
        detected = detect_repositories(cwd)
        if detected:
            print("✓ detected repositories", file=out)
            for name in detected:
                print(f"    {name}", file=out)
            globs = default_repository_globs(cwd, detected)

    workspace_root = args.workspace_root or ""
    config_path = bosun_dir / CONFIG_FILE

    if args.dry_run:
        print("would initialize bosun project", file=out)
        print(f"  Config: {PROJECT_DIR}/{CONFIG_FILE}", file=out)
        print(f"  Repositories: {', '.join(globs)}", file=out)
        if workspace_root:
            print(f"  Workspace root: {workspace_root}", file=out)
        return 0

    bosun_dir.mkdir(parents=True, exist_ok=True)
    if reinit:
        if globs:
            set_config_list_value(config_path, "repositories", globs)
        if workspace_root:
            set_config_value(config_path, "workspace_root", workspace_root)
    else:
        write_init_config(config_path, workspace_root, globs)

    heading = "updated project settings" if reinit else "initialized bosun project"
    display = ", ".join(globs) or "(none — add repository patterns to .bosun/config.yaml)"
    print(heading, file=out)
    print(f"  Config: {config_path}", file=out)
    print(f"  Repositories: {display}", file=out)
    if workspace_root:
        print(f"  Workspace root: {workspace_root}", file=out)
    print("next steps", file=out)
    print("  Run: bosun doctor to verify configuration", file=out)
    print("  Run: bosun start --issue <issue> to begin work", file=out)
    return 0


# --- misc commands ------------------------------------------------------------


def _run_branch(args: argparse.Namespace, out: TextIO) -> int:
    root = find_project_root()
    settings = _load_settings(_global_config_dir() / CONFIG_FILE, _project_config_path(root))
    print(build_branch_name(settings, args.issue, args.type, args.title, args.slug or ""), file=out)
    return 0


def _run_name(args: argparse.Namespace, out: TextIO) -> int:
    print(generate_ephemeral_name(), file=out)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bosun", description="Development workflow helper")
    parser.add_argument("--version", action="version", version=VERSION)
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("doctor", help="check configuration and connectivity").set_defaults(
        handler=lambda a, o: _run_doctor(o)
    )

    init = commands.add_parser("init", help="initialize a new bosun project")
    init.add_argument("--no-detect", action="store_true", help="skip auto-detection")
    init.add_argument("--workspace-root", default="", help="where workspaces are created")
    init.add_argument("--repositories", action="append", help="repository glob patterns")
    init.add_argument("--dry-run", action="store_true", help="show what would be done")
    init.set_defaults(handler=_run_init)

    config = commands.add_parser("config", help="view and manage configuration")
    config.add_argument("-o", "--output", choices=OUTPUT_FORMATS, default="")
    config.add_argument("--source", action="append", help="filter by source tier")
    config.set_defaults(handler=_config_show, group="")
    config_commands = config.add_subparsers(dest="config_command")

    show = config_commands.add_parser("show", help="display effective configuration")
    show.add_argument("group", nargs="?", default="")
    show.add_argument("-o", "--output", choices=OUTPUT_FORMATS, default="")
    show.add_argument("--source", action="append", help="filter by source tier")
    show.set_defaults(handler=_config_show)

    get = config_commands.add_parser("get", help="get a configuration value")
    get.add_argument("key")
    get.set_defaults(handler=_config_get)

    for name, handler in (("set", _config_set), ("unset", _config_unset)):
        sub = config_commands.add_parser(name, help=f"{name} a configuration value")
        sub.add_argument("key")
        if name == "set":
            sub.add_argument("value")
        sub.add_argument("-g", "--global", dest="is_global", action="store_true")
        sub.set_defaults(handler=handler)

    branch = commands.add_parser("branch", help="print the branch name for an issue")
    branch.add_argument("--issue", required=True)
    branch.add_argument("--type", default="story")
    branch.add_argument("--title", default="")
    branch.add_argument("--slug", default="")
    branch.set_defaults(handler=_run_branch)

    commands.add_parser("name", help="generate an ephemeral environment name").set_defaults(
        handler=_run_name
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return its exit status."""
    args = _build_parser().parse_args(list(sys.argv[1:] if argv is None else argv))
    try:
        return args.handler(args, sys.stdout)
    except KeyboardInterrupt:
        print("user cancelled", file=sys.stderr)
        return 1
    except KeyError as exc:
        message = exc.args[0] if exc.args and isinstance(exc.args[0], str) else str(exc)
        print(f"✗ {message}" if not str(exc).startswith("unknown") else f"✗ {exc}", file=sys.stderr)
        return 1
    except (RuntimeError, ValueError, OSError) as exc:
        print(f"✗ {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())