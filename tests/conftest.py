"""Pytest fixtures for deploywait tests."""

import os
from collections.abc import Callable
from typing import Any, Generator

import httpx
import pytest
from click.testing import CliRunner

from deploywait.config import (
    DeployWaitConfig,
    ProfileConfig,
    NetlifyConfig,
    WaitConfig,
)
from deploywait.core.context import DeployWaitContext
from deploywait.core.output import OutputFormat
from deploywait.deploy.stages import StagePolicy, WaitPolicies
from deploywait.reporting import ResultSink

API_URL = "https://api.netlify.test/api/v1"


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays and returns at once."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)

    @property
    def total(self) -> float:
        return sum(self.calls)


class RecordingSink(ResultSink):
    """Sink that keeps everything reported to it."""

    def __init__(self):
        self.exports: dict[str, str] = {}
        self.failures: list[str] = []
        self.flushed = 0

    def export(self, name: str, value: str) -> None:
        self.exports[name] = value

    def fail(self, message: str) -> None:
        self.failures.append(message)

    def flush(self) -> None:
        self.flushed += 1


class FakeNetlify:
    """Scripted Netlify API and deploy host behind an httpx.MockTransport.

    ``deploy_lists`` and ``deploy_states`` are consumed one entry per
    request; the last entry repeats once the script runs out.
    """

    def __init__(
        self,
        deploy_lists: list[list[dict[str, Any]]] | None = None,
        deploy_states: list[str] | None = None,
        url_handler: Callable[[httpx.Request], httpx.Response] | None = None,
    ):
        self.deploy_lists = deploy_lists or [[]]
        self.deploy_states = deploy_states or ["ready"]
        self.url_handler = url_handler or (lambda request: httpx.Response(200, text="ok"))
        self.requests: list[httpx.Request] = []
        self.list_calls = 0
        self.get_calls = 0
        self.url_calls = 0

    def _next(self, script: list[Any], index: int) -> Any:
        return script[min(index, len(script) - 1)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.url.host == "api.netlify.test":
            parts = path.rstrip("/").split("/")
            # /api/v1/sites/{site}/deploys[/{id}]
            if parts[-1] == "deploys":
                data = self._next(self.deploy_lists, self.list_calls)
                self.list_calls += 1
                return httpx.Response(200, json=data)
            if parts[-2] == "deploys":
                state = self._next(self.deploy_states, self.get_calls)
                self.get_calls += 1
                return httpx.Response(200, json={"id": parts[-1], "state": state})
            return httpx.Response(404, json={"code": 404, "message": "Not Found"})
        self.url_calls += 1
        return self.url_handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def api_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "api.netlify.test"]


def make_deploy(
    id: str = "d1",
    commit_ref: str = "abc123",
    context: str = "production",
    state: str = "ready",
    url: str = "https://x",
    **extra: Any,
) -> dict[str, Any]:
    """Build a deploy payload as the Netlify API returns it."""
    return {
        "id": id,
        "site_id": "site-1",
        "commit_ref": commit_ref,
        "context": context,
        "state": state,
        "deploy_ssl_url": url,
        "branch": "main",
        **extra,
    }


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def fast_policies() -> WaitPolicies:
    """Production timing; sleeps are faked so these cost nothing."""
    return WaitPolicies(
        lookup=StagePolicy(delay=5, timeout=60),
        ready=StagePolicy(delay=15, timeout=900),
        reachability=StagePolicy(delay=10, timeout=60),
    )


@pytest.fixture
def mock_config() -> DeployWaitConfig:
    """Create a mock configuration."""
    return DeployWaitConfig(
        profiles={
            "default": ProfileConfig(
                netlify=NetlifyConfig(auth_token="test-token", api_url=API_URL),
                wait=WaitConfig(site_id="site-1", context="production"),
            )
        }
    )


@pytest.fixture
def mock_context(mock_config: DeployWaitConfig) -> DeployWaitContext:
    """Create a mock deploywait context."""
    return DeployWaitContext(
        config=mock_config,
        profile="default",
        output_format=OutputFormat.TABLE,
        verbose=0,
        quiet=False,
        color=False,
    )


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Clean environment variables before each test."""
    env_vars = [
        "DEPLOYWAIT_NETLIFY_AUTH_TOKEN",
        "DEPLOYWAIT_NETLIFY_API_URL",
        "DEPLOYWAIT_SITE_ID",
        "DEPLOYWAIT_CONTEXT",
        "DEPLOYWAIT_PROFILE",
        "DEPLOYWAIT_CONFIG",
        "NETLIFY_AUTH_TOKEN",
        "INPUT_SITE_ID",
        "INPUT_CONTEXT",
        "GITHUB_ACTIONS",
        "GITHUB_EVENT_NAME",
        "GITHUB_EVENT_PATH",
        "GITHUB_SHA",
        "GITHUB_ENV",
        "GITHUB_OUTPUT",
        "deploy_id",
        "deploy_url",
    ]

    original = {k: os.environ.get(k) for k in env_vars}

    for k in env_vars:
        os.environ.pop(k, None)

    yield

    for k, v in original.items():
        if v is not None:
            os.environ[k] = v
        else:
            os.environ.pop(k, None)


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary config file."""
    config_content = """
version: "1"
global:
  output_format: json
profiles:
  default:
    netlify:
      auth_token: from_env
    wait:
      site_id: site-from-file
      context: deploy-preview
      lookup:
        delay: 2
        timeout: 10
"""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(config_content)
    return str(config_file)
