"""The three sequential wait stages."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from deploywait.clients.netlify import NetlifyClient
from deploywait.clients.probe import UrlProbe
from deploywait.core.exceptions import (
    DeployNotReadyError,
    DeployWaitError,
    WaitTimeoutError,
)
from deploywait.core.logging import StructuredLogger
from deploywait.core.retry import BoundedRetrier, RetryAttempt, RetryPolicy, Sleep
from deploywait.deploy.models import Deploy, DeployState

logger = StructuredLogger("deploy.stages")


@dataclass(frozen=True)
class StagePolicy:
    """Delay between polls and the overall time budget of a stage, in seconds."""

    delay: float
    timeout: float

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy.from_timeout(self.timeout, self.delay)


@dataclass(frozen=True)
class WaitPolicies:
    """Timing for each stage of a wait run."""

    lookup: StagePolicy = field(default_factory=lambda: StagePolicy(delay=5, timeout=60))
    ready: StagePolicy = field(default_factory=lambda: StagePolicy(delay=15, timeout=60 * 15))
    reachability: StagePolicy = field(default_factory=lambda: StagePolicy(delay=10, timeout=60))


class WaitStage(ABC):
    """Base class for a polling stage backed by a BoundedRetrier."""

    def __init__(self, policy: StagePolicy, sleep: Sleep = asyncio.sleep):
        self.policy = policy
        self.retrier = BoundedRetrier(
            policy.retry_policy(),
            sleep=sleep,
            on_failure=self._on_attempt_failed,
        )

    @property
    @abstractmethod
    def name(self) -> str:
        """Get stage name."""
        pass

    def _on_attempt_failed(self, attempt: RetryAttempt) -> None:
        """Hook called after each failed attempt."""
        logger.debug(
            "Stage attempt failed",
            stage=self.name,
            attempt=attempt.index,
            error=str(attempt.error),
        )

    def _timeout(self, what: str, error: Exception) -> WaitTimeoutError:
        return WaitTimeoutError(
            f"Timed out after {self.policy.timeout:g}s waiting for {what}: {error}",
            timeout_seconds=int(self.policy.timeout),
            stage=self.name,
        )


class DeployLookupStage(WaitStage):
    """Poll the deploy list until a deploy for the commit shows up."""

    name = "lookup"

    def __init__(
        self,
        client: NetlifyClient,
        policy: StagePolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        super().__init__(policy or WaitPolicies().lookup, sleep)
        self._client = client

    def _on_attempt_failed(self, attempt: RetryAttempt) -> None:
        super()._on_attempt_failed(attempt)
        if isinstance(attempt.error, DeployNotReadyError):
            logger.warning("Deploy not available yet")
        else:
            logger.warning("Listing deploys failed", error=str(attempt.error))

    async def wait(self, site_id: str, sha: str, context: str | None = None) -> Deploy:
        """Return the first deploy built from ``sha`` in ``context``.

        Raises:
            WaitTimeoutError: If no matching deploy appears in time
        """
        logger.info("Waiting for the deploy object to be created", sha=sha, context=context or "any")

        async def find_deploy() -> Deploy:
            deploys = await self._client.list_site_deploys(site_id)
            for data in deploys:
                deploy = Deploy.from_api(data)
                if deploy.matches(sha, context):
                    return deploy
            raise DeployNotReadyError("deploy not available yet")

        try:
            deploy = await self.retrier.run(find_deploy)
        except Exception as e:
            raise self._timeout(f"the deploy of {sha} to be created", e) from e

        logger.info(f"The deployment has been created and has id {deploy.id}")
        logger.info(f"The related url is {deploy.url}")
        return deploy


class DeployReadyStage(WaitStage):
    """Poll a deploy until it reaches a terminal state."""

    name = "ready"

    def __init__(
        self,
        client: NetlifyClient,
        policy: StagePolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        super().__init__(policy or WaitPolicies().ready, sleep)
        self._client = client

    def _on_attempt_failed(self, attempt: RetryAttempt) -> None:
        super()._on_attempt_failed(attempt)
        if isinstance(attempt.error, DeployNotReadyError):
            logger.warning("Deploy not finished yet")
        else:
            logger.warning("Fetching deploy failed", error=str(attempt.error))

    async def wait(self, site_id: str, deploy_id: str) -> Deploy:
        """Return the deploy once its state is ``ready`` or ``error``.

        An ``error`` state ends the wait like ``ready`` does; this stage only
        detects that the deploy stopped changing.

        Raises:
            WaitTimeoutError: If the deploy is still building when time runs out
        """
        logger.info(f"Waiting for the deploy {deploy_id} to finish")

        async def check_deploy() -> Deploy:
            deploy = Deploy.from_api(await self._client.get_site_deploy(site_id, deploy_id))
            if deploy.is_terminal:
                return deploy
            raise DeployNotReadyError("deploy still ongoing", details={"state": deploy.state})

        try:
            deploy = await self.retrier.run(check_deploy)
        except Exception as e:
            raise self._timeout(f"the deploy {deploy_id} to finish", e) from e

        if deploy.state == DeployState.ERROR.value:
            logger.warning(f"The deploy {deploy_id} finished in the error state")
        else:
            logger.info("The deployment has finished")
        return deploy


class UrlReachabilityStage(WaitStage):
    """Poll a URL until it answers with any HTTP response."""

    name = "reachability"

    def __init__(
        self,
        probe: UrlProbe,
        policy: StagePolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        super().__init__(policy or WaitPolicies().reachability, sleep)
        self._probe = probe

    def _on_attempt_failed(self, attempt: RetryAttempt) -> None:
        super()._on_attempt_failed(attempt)
        logger.warning("Url not accessible yet", error=str(attempt.error))

    async def wait(self, url: str | None) -> int:
        """Return the status code of the first response from ``url``.

        Raises:
            DeployWaitError: If there is no url to check
            WaitTimeoutError: If the url never responds
        """
        if not url:
            raise DeployWaitError("The deploy has no url to check")

        logger.info(f"Waiting for the url {url} to be accessible")

        async def request_url() -> int:
            response = await self._probe.probe(url)
            return response.status_code

        try:
            status_code = await self.retrier.run(request_url)
        except Exception as e:
            raise self._timeout(f"the url {url} to be accessible", e) from e

        logger.info("The url is accessible", status=status_code)
        return status_code
