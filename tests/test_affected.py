import pytest

from bosun_flow.affected import (
    AffectedResult,
    SummaryLine,
    any_path_matches,
    match_service_paths,
    resolve_service_paths,
    summarize_affected,
)
from bosun_flow.settings import Settings


@pytest.mark.parametrize(
    "changed, prefixes, want",
    [
        (["cmd/api/activity/handler.go"], ["cmd/api/activity/"], True),
        (["go.mod"], ["go.mod"], True),
        (["cmd/worker/main.go"], ["cmd/api/activity/"], False),
        (["go.modx"], ["go.mod"], False),
        (["README.md", "cmd/api/activity/handler.go"], ["cmd/api/activity/"], True),
        (["pkg/shared/util.go"], ["cmd/api/", "pkg/shared/"], True),
        (None, ["cmd/api/"], False),
        (["cmd/api/main.go"], None, False),
        (["pkg/auth/jwt/token.go"], ["pkg/"], True),
    ],
    ids=[
        "directory prefix match",
        "exact file match",
        "no match",
        "prefix without trailing slash requires exact match",
        "multiple changed files one matches",
        "multiple prefixes one matches",
        "empty changed files",
        "empty prefixes",
        "nested directory match",
    ],
)
def test_any_path_matches(changed, prefixes, want):
    assert any_path_matches(changed, prefixes) is want


SERVICES = ["activity-api", "admin-api", "worker"]
PATH_MAP = {
    "activity-api": ["cmd/api/activity/"],
    "admin-api": ["cmd/api/admin/"],
    "worker": ["cmd/worker/"],
    "_shared": ["go.mod", "go.sum", "pkg/"],
}


def test_single_service_affected():
    changed = ["cmd/api/activity/handler.go", "cmd/api/activity/routes.go"]
    result = match_service_paths("extracker", SERVICES, changed, PATH_MAP)
    assert result.has_changes
    assert result.services == ["activity-api"]
    assert len(result.skipped) == 2


def test_shared_trigger_includes_all():
    result = match_service_paths("extracker", SERVICES, ["go.mod"], PATH_MAP)
    assert result.has_changes
    assert len(result.services) == 3
    assert result.skipped == []


def test_shared_pkg_prefix_includes_all():
    result = match_service_paths("extracker", SERVICES, ["pkg/auth/token.go"], PATH_MAP)
    assert result.has_changes
    assert len(result.services) == 3


def test_no_matching_paths():
    changed = ["README.md", ".github/workflows/ci.yml"]
    result = match_service_paths("extracker", SERVICES, changed, PATH_MAP)
    assert not result.has_changes
    assert result.services == []
    assert len(result.skipped) == 3


def test_multiple_services_affected():
    changed = ["cmd/api/activity/handler.go", "cmd/worker/main.go"]
    result = match_service_paths("extracker", SERVICES, changed, PATH_MAP)
    assert result.has_changes
    assert len(result.services) == 2
    assert len(result.skipped) == 1


def test_service_without_path_config_included_conservatively():
    services = SERVICES + ["unmapped-svc"]
    result = match_service_paths(
        "extracker", services, ["cmd/api/activity/handler.go"], PATH_MAP
    )
    assert "unmapped-svc" in result.services


def test_match_service_paths_keeps_repo_name():
    result = match_service_paths("extracker", SERVICES, ["go.mod"], PATH_MAP)
    assert result.repo_name == "extracker"


def test_resolve_service_paths_map_form():
    settings = Settings(
        {
            "services": {
                "api": {
                    "activity-api": ["cmd/api/activity/", 5],
                    "worker": "cmd/worker/",
                    "empty": [],
                }
            }
        }
    )
    assert resolve_service_paths(settings, "api") == {
        "activity-api": ["cmd/api/activity/"],
        "worker": ["cmd/worker/"],
    }


def test_resolve_service_paths_string_form_returns_none():
    settings = Settings({"services": {"api": "api-service"}})
    assert resolve_service_paths(settings, "api") is None


def test_resolve_service_paths_missing_returns_none():
    assert resolve_service_paths(Settings(), "api") is None


def test_summary_no_changes():
    lines = summarize_affected(
        [AffectedResult(repo_name="web", skipped=["web-ui", "web-api"])]
    )
    assert lines == [SummaryLine("skip", "web: no changes, skipping (web-ui, web-api)")]


def test_summary_partial():
    result = AffectedResult(
        repo_name="extracker",
        has_changes=True,
        services=["activity-api"],
        skipped=["worker"],
    )
    lines = summarize_affected([result])
    assert lines[0] == SummaryLine("complete", "extracker: 1 of 2 services affected")
    assert lines[1:] == [
        SummaryLine("item", "activity-api", "deploy"),
        SummaryLine("item", "worker", "skip"),
    ]


def test_summary_all_affected():
    result = AffectedResult(repo_name="api", has_changes=True, services=["a", "b"])
    assert summarize_affected([result]) == [
        SummaryLine("complete", "api: all services affected (a, b)")
    ]


def test_summary_empty_result_produces_nothing():
    assert summarize_affected([AffectedResult(repo_name="api")]) == []