"""Wait command."""

import sys

import click

from deploywait.config import validate_deploy_context
from deploywait.core.async_utils import run_sync, run_with_timeout
from deploywait.core.context import pass_context, DeployWaitContext
from deploywait.core.exceptions import ConfigError, WaitTimeoutError
from deploywait.core.output import format_duration
from deploywait.deploy.models import DeployContext, DeployState, WaitInputs
from deploywait.deploy.orchestrator import WaitOrchestrator
from deploywait.pipeline import resolve_commit_sha
from deploywait.reporting import create_sink


@click.command("wait")
@click.option("-s", "--site-id", metavar="ID", help="Netlify site id (default: site_id input)")
@click.option(
    "--context",
    "deploy_context",
    metavar="CONTEXT",
    help=f"Deploy context to match: {', '.join(c.value for c in DeployContext)}",
)
@click.option("--sha", metavar="SHA", help="Commit to wait for (default: from the pipeline)")
@click.option(
    "--deadline",
    type=click.FloatRange(min=0, min_open=True),
    metavar="SECONDS",
    help="Give up on the whole run after SECONDS",
)
@pass_context
def wait(
    ctx: DeployWaitContext,
    site_id: str | None,
    deploy_context: str | None,
    sha: str | None,
    deadline: float | None,
) -> None:
    """Wait until the deploy of a commit is created, finished and reachable.

    On success the deploy id and url are exported as ``deploy_id`` and
    ``deploy_url``. In GitHub Actions they land in the job environment and
    in the step outputs.

    \b
    Examples:
        deploywait wait --site-id 3970e0fe-8564-4903-9a55-c5f8de49fb8b
        deploywait wait --site-id my-site --context deploy-preview
        deploywait -o json wait --sha 1a2b3c4 --deadline 1200
    """
    pipeline = ctx.pipeline
    sink = create_sink(pipeline.actions, ctx.output, pipeline.env, pipeline.output)
    profile = ctx.profile

    try:
        if deploy_context is not None:
            context_filter = validate_deploy_context(deploy_context)
        else:
            context_filter = profile.wait.get_context()
        commit = resolve_commit_sha(sha, pipeline)
    except ConfigError as e:
        sink.fail(str(e))
        sys.exit(1)

    inputs = WaitInputs(
        site_id=site_id or profile.wait.get_site_id(),
        sha=commit,
        auth_token=profile.netlify.get_auth_token(),
        context=context_filter,
    )

    orchestrator = WaitOrchestrator(
        sink,
        policies=profile.wait.get_policies(),
        api_url=profile.netlify.get_api_url(),
        http_timeout=profile.netlify.timeout,
    )

    try:
        if deadline:
            result = run_sync(
                run_with_timeout(
                    orchestrator.run(inputs),
                    deadline,
                    timeout_message=f"Gave up waiting for the deploy after {deadline:g}s",
                )
            )
        else:
            result = run_sync(orchestrator.run(inputs))
    except WaitTimeoutError as e:
        sink.fail(str(e))
        sys.exit(1)

    if not result.success:
        sys.exit(1)

    if result.deploy and result.deploy.state == DeployState.ERROR.value:
        ctx.output.print_warning(f"Deploy {result.deploy_id} finished in the error state")

    ctx.output.print_success(
        f"Deploy {result.deploy_id} is live at {result.deploy_url} "
        f"({format_duration(result.elapsed)})"
    )
