"""Workflow helpers: branch names, change detection, configuration, project setup and workflow dispatch."""

__version__ = "0.1.0"