# bosun-flow

A small toolkit for day-to-day feature work across one or more git
repositories. It provides:

- **Branch names** built from an issue key, issue type and title using a
  configurable template (`build_branch_name`, `slugify`,
  `resolve_category` in `bosun_flow.branch`).
- **Change detection** that decides which services in a repository are
  affected by a list of changed files (`any_path_matches`,
  `match_service_paths`, `resolve_service_paths`, `summarize_affected`
  in `bosun_flow.affected`).
- **Configuration values** addressed by dot-separated, case-insensitive
  keys (`Settings` in `bosun_flow.settings`), with attribution of each
  key to the project file, the global file or a `BOSUN_*` environment
  variable (`ConfigSources`, `Source`).
- **Config file editing** (`set_config_value`, `set_config_map`,
  `set_config_list_value`, `unset_config_value`, `resolve_config_path`
  in `bosun_flow.config_store`).
- **Machine-readable output** of configuration as YAML, JSON or
  `BOSUN_*=value` lines (`render_machine`, `render_yaml`, `render_json`,
  `render_env` in `bosun_flow.config_output`).
- **Project setup** helpers that detect git repositories, choose default
  repository patterns, write a starter config and locate the project
  root (`bosun_flow.project_init`).
- **Workflow dispatch** for GitHub Actions
  (`GitHubActionsAdapter` and `TriggerRequest` in `bosun_flow.cicd`).
- **Ephemeral environment names** such as `brave-falcon`
  (`generate_ephemeral_name` in `bosun_flow.ephemeral`).

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Command line

Installing the package provides the `bosun` command.

Configuration is read from `config.yaml` in `$XDG_CONFIG_HOME/bosun`
(or `~/.config/bosun`) and from `.bosun/config.yaml` in the nearest
directory at or above the current one that has a `.bosun/` directory.
Project values override global ones.

```
bosun init [--no-detect] [--workspace-root DIR] [--repositories GLOBS] [--dry-run]
```

Creates `.bosun/config.yaml` in the current directory. Unless
`--no-detect` or `--repositories` is given, it looks for git
repositories in the directory and its immediate children and uses `.`
and/or `./*` as patterns. `--repositories` may be repeated and takes
comma-separated patterns. Run again in an initialised project, it
updates only `repositories` and `workspace_root`. It refuses to run
inside another bosun project.

```
bosun config [show [GROUP]] [-o yaml|json|env] [--source TIER]
bosun config get KEY
bosun config set KEY VALUE [-g]
bosun config unset KEY [-g]
```

`show` (also the bare `config`) prints the merged configuration, YAML by
default. `GROUP` narrows it to one top-level key. `--source` (repeatable,
comma-separated: `global`, `project`, `env`) keeps only keys attributed
to those tiers; the `env` tier matches keys whose `BOSUN_*` variable is
set, though the values printed are those from the files. `set` and
`unset` write the project file, or the global file with `-g`.

```
bosun doctor
```

Reports on the global and project config files, git, the branch
template, and the issue tracker, notification and CI/CD settings.

```
bosun branch --issue KEY [--type story] [--title TITLE] [--slug SLUG]
bosun name
```

`branch` prints the branch name for an issue using the configured
`branch.template` and `branch.categories`; `name` prints a random
ephemeral environment name.

## Library use

```python
from bosun_flow.settings import Settings
from bosun_flow.branch import build_branch_name

settings = Settings({"branch": {"categories": {"story": "feature"}}})
build_branch_name(settings, "PROJ-123", "Story", "Add widget endpoint", "")
# 'feature/PROJ-123_add-widget-endpoint'
```

The default template is `{{.Category}}/{{.IssueNumber}}_{{.IssueSlug}}`;
`{{.IssueTitle}}` is also available. Anything else in a template raises
`BranchTemplateError`.

```python
from bosun_flow.affected import match_service_paths

result = match_service_paths(
    "api",
    ["activity-api", "worker"],
    ["cmd/api/activity/handler.go"],
    {"activity-api": ["cmd/api/activity/"], "worker": ["cmd/worker/"]},
)
result.services  # ['activity-api']
result.skipped   # ['worker']
```

A path ending in `/` matches anything beneath that directory; any other
path must match a changed file exactly. A `_shared` entry marks every
service as affected when one of its paths matches, and a service with no
entry is always included.

```python
from bosun_flow.cicd import GitHubActionsAdapter, TriggerRequest

adapter = GitHubActionsAdapter("token")
adapter.trigger_workflow(TriggerRequest(
    owner="org",
    repository="repo",
    workflow="deploy-preview.yml",
    ref="feature/test",
    inputs={"issue": "PROJ-123"},
))
```

An HTTP status of 400 or above raises `GitHubActionsError`, whose message
carries the status code and the response body.

## What it does not do

- It does not talk to an issue tracker, a code host or a chat service:
  there are no commands to create issues, open pull requests or post
  notifications, and `doctor` checks those settings only for presence,
  not connectivity or credentials.
- It does not create or remove worktrees or branches, and does not run
  git to find changed files; change detection works on file lists you
  supply.
- The command line has no interactive prompts, no `config edit`, and no
  tree view of configuration; values are not read from environment
  variables, which only affect source attribution.