"""Branch name generation from a configurable template."""

from __future__ import annotations

import re

from bosun_flow.settings import Settings

DEFAULT_PATTERN = "{{.Category}}/{{.IssueNumber}}_{{.IssueSlug}}"

_SLUG_RE = re.compile(r"[^a-z0-9]+")
_ACTION_RE = re.compile(r"\{\{(- )?(.*?)( -)?\}\}", re.DOTALL)
_FIELD_RE = re.compile(r"\s*\.([A-Za-z_][A-Za-z0-9_]*)\s*")


class BranchTemplateError(ValueError):
    """The branch template could not be parsed or executed."""


def _render(pattern: str, fields: dict[str, str]) -> str:
    parts: list[str] = []
    pos = 0
    trim_next = False
    for match in _ACTION_RE.finditer(pattern):
        text = pattern[pos:match.start()]
        if trim_next:
            text = text.lstrip()
        if match.group(1):
            text = text.rstrip()
        if "{{" in text:
            raise BranchTemplateError(f"template: branch: malformed action in {pattern!r}")
        parts.append(text)

        action = match.group(2).strip()
        if action.startswith("/*") and action.endswith("*/"):
            pass
        else:
            field = _FIELD_RE.fullmatch(match.group(2))
            if field is None:
                raise BranchTemplateError(f"template: branch: unsupported action {{{{{action}}}}}")
            name = field.group(1)
            if name not in fields:
                raise BranchTemplateError(f"template: branch: can't evaluate field {name}")
            parts.append(fields[name])
        trim_next = bool(match.group(3))
        pos = match.end()

    tail = pattern[pos:]
    if trim_next:
        tail = tail.lstrip()
    if "{{" in tail:
        raise BranchTemplateError(f"template: branch: unclosed action in {pattern!r}")
    parts.append(tail)
    return "".join(parts)


def build_branch_name(
    settings: Settings,
    issue_key: str,
    issue_type: str,
    issue_title: str,
    slug: str = "",
) -> str:
    """Build a branch name from the configured template and issue details.

    A non-empty ``slug`` is used as given; otherwise one is derived from the title.
    """
    pattern = settings.get_string("branch.template") or DEFAULT_PATTERN
    category = resolve_category(settings, issue_type)
    if not slug:
        slug = slugify(issue_title)
    return _render(
        pattern,
        {
            "Category": category,
            "IssueNumber": issue_key,
            "IssueSlug": slug,
            "IssueTitle": issue_title,
        },
    )


def resolve_category(settings: Settings, issue_type: str) -> str:
    """Map an issue type to a branch category, defaulting to the lowercase type."""
    lowered = issue_type.lower()
    return settings.get_string(f"branch.categories.{lowered}") or lowered


def slugify(text: str) -> str:
    """Turn a title into a branch-safe slug."""
    return _SLUG_RE.sub("-", text.lower()).strip("-")