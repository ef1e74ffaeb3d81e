[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bosun-flow"
version = "0.1.0"
description = "Developer workflow helper: branch naming, change detection, layered configuration and GitHub Actions workflow dispatch"
requires-python = ">=3.10"
keywords = ["workflow", "git", "branches", "ci", "github-actions", "configuration"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
bosun = "bosun_flow.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["bosun_flow"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
