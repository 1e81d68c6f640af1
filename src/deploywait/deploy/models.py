"""Deploy data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DeployContext(str, Enum):
    """Netlify deploy contexts."""

    PRODUCTION = "production"
    BRANCH_DEPLOY = "branch-deploy"
    DEPLOY_PREVIEW = "deploy-preview"


class DeployState(str, Enum):
    """Deploy states reported by Netlify.

    The platform defines more states than these; only ``READY`` and
    ``ERROR`` are terminal.
    """

    NEW = "new"
    PENDING = "pending"
    ENQUEUED = "enqueued"
    BUILDING = "building"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


TERMINAL_STATES = frozenset({DeployState.READY.value, DeployState.ERROR.value})


@dataclass
class Deploy:
    """A single deploy of a Netlify site."""

    id: str
    commit_ref: str | None = None
    context: str | None = None
    state: str | None = None
    url: str | None = None
    site_id: str | None = None
    branch: str | None = None
    created_at: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Deploy":
        """Build a Deploy from a Netlify API payload."""
        return cls(
            id=str(data["id"]),
            commit_ref=data.get("commit_ref"),
            context=data.get("context"),
            state=data.get("state"),
            url=data.get("deploy_ssl_url"),
            site_id=data.get("site_id"),
            branch=data.get("branch"),
            created_at=data.get("created_at"),
            raw=data,
        )

    @property
    def is_terminal(self) -> bool:
        """Check if the deploy will not change state anymore."""
        return self.state in TERMINAL_STATES

    def matches(self, sha: str, context: str | None = None) -> bool:
        """Check if the deploy was built from ``sha`` in ``context``.

        An empty context matches any context.
        """
        return self.commit_ref == sha and (not context or self.context == context)


@dataclass
class WaitInputs:
    """Everything a wait run needs, resolved up front."""

    site_id: str | None
    sha: str | None
    auth_token: str | None = field(default=None, repr=False)
    context: str | None = None


@dataclass
class WaitResult:
    """Outcome of a wait run."""

    success: bool
    deploy: Deploy | None = None
    message: str = ""
    stage: str | None = None
    elapsed: float = 0.0

    @property
    def deploy_id(self) -> str | None:
        return self.deploy.id if self.deploy else None

    @property
    def deploy_url(self) -> str | None:
        return self.deploy.url if self.deploy else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {
            "success": self.success,
            "deploy_id": self.deploy_id,
            "deploy_url": self.deploy_url,
        }
        if self.deploy:
            data["state"] = self.deploy.state
        if not self.success:
            data["stage"] = self.stage
            data["message"] = self.message
        return data
