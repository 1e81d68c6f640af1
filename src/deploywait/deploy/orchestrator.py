"""Run the lookup, ready and reachability stages in order."""

import asyncio
import time

import httpx

from deploywait.clients.netlify import DEFAULT_API_URL, NetlifyClient
from deploywait.clients.probe import UrlProbe
from deploywait.core.exceptions import ConfigError, WaitTimeoutError
from deploywait.core.logging import StructuredLogger
from deploywait.core.retry import Sleep
from deploywait.deploy.models import WaitInputs, WaitResult
from deploywait.deploy.stages import (
    DeployLookupStage,
    DeployReadyStage,
    UrlReachabilityStage,
    WaitPolicies,
)
from deploywait.reporting import ResultSink

logger = StructuredLogger("deploy.orchestrator")


class WaitOrchestrator:
    """Wait for a deploy to exist, finish, and answer on its url.

    Any failure ends the run: it is reported to the sink and returned as an
    unsuccessful ``WaitResult``. Nothing is raised past ``run``.
    """

    def __init__(
        self,
        sink: ResultSink,
        policies: WaitPolicies | None = None,
        sleep: Sleep = asyncio.sleep,
        api_url: str = DEFAULT_API_URL,
        http_timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._sink = sink
        self._policies = policies or WaitPolicies()
        self._sleep = sleep
        self._api_url = api_url
        self._http_timeout = http_timeout
        self._transport = transport

    def validate(self, inputs: WaitInputs) -> None:
        """Check required inputs before touching the network.

        Raises:
            ConfigError: On the first missing input
        """
        if not inputs.sha:
            raise ConfigError("The commit could not be determined from the pipeline context")
        if not inputs.site_id:
            raise ConfigError("The `site_id` parameter is required and was not provided")
        if not inputs.auth_token:
            raise ConfigError(
                "The `NETLIFY_AUTH_TOKEN` env variable is required and was not provided"
            )

    async def run(self, inputs: WaitInputs) -> WaitResult:
        """Run all stages and report the outcome."""
        started = time.monotonic()
        result = WaitResult(success=False)

        try:
            self.validate(inputs)
            await self._run_stages(inputs, result)
            self._sink.export("deploy_id", result.deploy_id or "")
            self._sink.export("deploy_url", result.deploy_url or "")
            result.success = True
        except Exception as e:
            result.message = str(e) or e.__class__.__name__
            if isinstance(e, ConfigError) and result.stage is None:
                result.stage = "config"
            elif isinstance(e, WaitTimeoutError) and e.stage:
                result.stage = e.stage
            logger.debug("Wait run failed", stage=result.stage, error=result.message)
            self._sink.fail(result.message)
        finally:
            result.elapsed = time.monotonic() - started
            self._sink.flush()

        logger.debug("Wait run summary", elapsed=round(result.elapsed, 1), result=result.to_dict())
        return result

    async def _run_stages(self, inputs: WaitInputs, result: WaitResult) -> None:
        log = logger.bind(site_id=inputs.site_id)
        log.debug("Starting wait run", sha=inputs.sha, context=inputs.context or "any")

        async with NetlifyClient(
            inputs.auth_token,
            base_url=self._api_url,
            timeout=self._http_timeout,
            transport=self._transport,
        ) as client:
            result.stage = DeployLookupStage.name
            lookup = DeployLookupStage(client, self._policies.lookup, self._sleep)
            deploy = await lookup.wait(inputs.site_id, inputs.sha, inputs.context)
            result.deploy = deploy

            result.stage = DeployReadyStage.name
            ready = DeployReadyStage(client, self._policies.ready, self._sleep)
            finished = await ready.wait(inputs.site_id, deploy.id)
            deploy.state = finished.state

        async with UrlProbe(timeout=self._http_timeout, transport=self._transport) as probe:
            result.stage = UrlReachabilityStage.name
            reachability = UrlReachabilityStage(probe, self._policies.reachability, self._sleep)
            await reachability.wait(deploy.url)

        result.stage = None
        log.debug("Wait run finished", deploy_id=deploy.id)
