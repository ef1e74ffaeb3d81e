import subprocess
from unittest import mock

import pytest
import yaml

from bosun_flow.cli import check_branch_template, check_git, command_breadcrumb, main
from bosun_flow.settings import Settings


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    project = tmp_path / "proj"
    project.mkdir()
    monkeypatch.chdir(project)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    return project


def test_breadcrumb_root_always_bosun():
    assert command_breadcrumb(["root", "config", "show"]) == "bosun › config › show"


def test_breadcrumb_single_and_empty():
    assert command_breadcrumb(["anything"]) == "bosun"
    assert command_breadcrumb([]) == ""


def test_check_branch_template_default_and_set():
    assert check_branch_template(Settings()) == "default"
    pattern = "{{.Category}}/{{.IssueNumber}}_{{.IssueSlug}}"
    assert check_branch_template(Settings({"branch": {"template": pattern}})) == pattern


def test_check_git_not_on_path():
    with mock.patch("bosun_flow.cli.shutil.which", return_value=None):
        with pytest.raises(RuntimeError, match="not found on PATH"):
            check_git()


def test_check_git_strips_prefix():
    done = subprocess.CompletedProcess(["git"], 0, stdout="git version 2.40.0\n", stderr="")
    with mock.patch("bosun_flow.cli.shutil.which", return_value="/usr/bin/git"), \
            mock.patch("bosun_flow.cli.subprocess.run", return_value=done):
        assert check_git() == "2.40.0"


def test_check_git_version_failure_reports_found():
    err = subprocess.CalledProcessError(1, ["git", "--version"])
    with mock.patch("bosun_flow.cli.shutil.which", return_value="/usr/bin/git"), \
            mock.patch("bosun_flow.cli.subprocess.run", side_effect=err):
        assert check_git() == "found"


def test_init_writes_config(workspace):
    assert main(["init", "--workspace-root", ".ws", "--repositories", "./*"]) == 0
    data = yaml.safe_load((workspace / ".bosun" / "config.yaml").read_text())
    assert data["repositories"] == ["./*"]
    assert data["workspace_root"] == ".ws"


def test_init_dry_run_creates_nothing(workspace, capsys):
    assert main(["init", "--dry-run", "--repositories", "."]) == 0
    assert not (workspace / ".bosun").exists()
    assert "would initialize bosun project" in capsys.readouterr().out


def test_init_nested_project_fails(workspace, monkeypatch):
    (workspace / ".bosun").mkdir()
    inner = workspace / "inner"
    inner.mkdir()
    monkeypatch.chdir(inner)
    assert main(["init", "--no-detect"]) == 1
    assert not (inner / ".bosun").exists()


def test_config_set_get_unset_round_trip(workspace, capsys):
    assert main(["init", "--no-detect"]) == 0
    assert main(["config", "set", "jira.project", "PROJ"]) == 0
    capsys.readouterr()
    assert main(["config", "get", "jira.project"]) == 0
    assert capsys.readouterr().out.strip() == "PROJ"
    assert main(["config", "unset", "jira.project"]) == 0
    assert main(["config", "get", "jira.project"]) == 1


def test_config_set_global_without_project(workspace, tmp_path, capsys):
    assert main(["config", "set", "-g", "cicd", "github_actions"]) == 0
    stored = yaml.safe_load((tmp_path / "xdg" / "bosun" / "config.yaml").read_text())
    assert stored == {"cicd": "github_actions"}


def test_config_set_outside_project_fails(workspace):
    assert main(["config", "set", "jira.project", "PROJ"]) == 1


def test_config_show_env_and_unknown_group(workspace, capsys):
    main(["init", "--no-detect"])
    main(["config", "set", "jira.project", "PROJ"])
    capsys.readouterr()
    assert main(["config", "show", "jira", "-o", "env"]) == 0
    assert capsys.readouterr().out == "BOSUN_JIRA_PROJECT=PROJ\n"
    assert main(["config", "show", "nope", "-o", "yaml"]) == 1


def test_branch_command(workspace, capsys):
    assert main(["branch", "--issue", "PROJ-1", "--type", "Task", "--title", "Update docs"]) == 0
    assert capsys.readouterr().out.strip() == "task/PROJ-1_update-docs"


def test_doctor_reports_missing_git(workspace, capsys):
    with mock.patch("bosun_flow.cli.shutil.which", return_value=None):
        assert main(["doctor"]) == 0
    out = capsys.readouterr().out
    assert "✗ git: not found on PATH" in out
    assert "✓ branch template: default" in out
    assert "failed" in out.splitlines()[-1]