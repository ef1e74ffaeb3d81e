"""CI/CD pipeline triggering, with a GitHub Actions implementation."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

DEFAULT_BASE_URL = "https://api.github.com"


@dataclass
class TriggerRequest:
    """Parameters for dispatching a CI/CD workflow."""

    owner: str
    repository: str
    workflow: str
    ref: str
    inputs: dict[str, str] | None = None


class CICD(ABC):
    """Abstract CI/CD pipeline operations."""

    @abstractmethod
    def trigger_workflow(self, request: TriggerRequest) -> None:
        """Dispatch a workflow run."""


class GitHubActionsError(RuntimeError):
    """A GitHub Actions request failed."""

    def __init__(self, message: str, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class GitHubActionsAdapter(CICD):
    """Triggers workflows through the GitHub Actions REST API."""

    def __init__(self, token: str, base_url: str = DEFAULT_BASE_URL, timeout: float = 30.0) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def trigger_workflow(self, request: TriggerRequest) -> None:
        """Dispatch a workflow run on the given ref with the given inputs."""
        path = (
            f"/repos/{request.owner}/{request.repository}"
            f"/actions/workflows/{request.workflow}/dispatches"
        )
        self._request("POST", path, {"ref": request.ref, "inputs": request.inputs})

    def _request(self, method: str, path: str, body: Any = None) -> bytes:
        data = json.dumps(body).encode("utf-8") if body is not None else None
        req = urllib.request.Request(
            self.base_url + path,
            data=data,
            method=method,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
                "Accept": "application/vnd.github+json",
            },
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return resp.read()
        except urllib.error.HTTPError as exc:
            payload = exc.read().decode("utf-8", "replace")
            raise GitHubActionsError(
                f"github actions API error (HTTP {exc.code}): {payload}",
                status=exc.code,
                body=payload,
            ) from exc
        except urllib.error.URLError as exc:
            raise GitHubActionsError(f"executing request: {exc.reason}") from exc