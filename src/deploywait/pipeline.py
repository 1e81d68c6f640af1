"""Read the CI pipeline environment and resolve the commit to wait for."""

import json
from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

from deploywait.core.exceptions import ConfigError
from deploywait.core.logging import StructuredLogger

logger = StructuredLogger("pipeline")

PULL_REQUEST_EVENTS = ("pull_request", "pull_request_target")


class PipelineContext(BaseSettings):
    """The GitHub Actions environment of the current job.

    Every field maps to a ``GITHUB_*`` variable; outside of Actions they are
    all unset.
    """

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    actions: bool = False
    event_name: str | None = None
    event_path: str | None = None
    sha: str | None = None
    env: str | None = None
    output: str | None = None

    @property
    def is_pull_request(self) -> bool:
        return self.event_name in PULL_REQUEST_EVENTS

    def load_event(self) -> dict[str, Any]:
        """Load the webhook payload that triggered the workflow."""
        if not self.event_path:
            return {}
        path = Path(self.event_path)
        if not path.exists():
            logger.warning("Event payload not found", path=self.event_path)
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                event = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read event payload {path}: {e}")
        if not isinstance(event, dict):
            raise ConfigError(f"Event payload {path} is not a JSON object")
        return event

    def resolve_sha(self) -> str | None:
        """Get the commit the deploy was built from.

        For pull request events this is the head commit of the pull request,
        not the merge commit GitHub checks out; otherwise the run's own commit.
        """
        if self.is_pull_request:
            event = self.load_event()
            pull_request = event.get("pull_request") or {}
            sha = (pull_request.get("head") or {}).get("sha")
            logger.debug("Resolved pull request head", sha=sha)
            return sha
        return self.sha


def resolve_commit_sha(explicit: str | None = None, context: PipelineContext | None = None) -> str | None:
    """Get the commit to wait for, preferring an explicit value."""
    if explicit:
        return explicit
    return (context or PipelineContext()).resolve_sha()
