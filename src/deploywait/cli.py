"""Main CLI entry point for deploywait."""

import sys
from typing import Any

import click
from rich.console import Console

from deploywait import __version__
from deploywait.config import load_config
from deploywait.core.context import DeployWaitContext
from deploywait.core.output import OutputFormat
from deploywait.core.exceptions import DeployWaitError, ConfigError


CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 120,
}


class OutputFormatType(click.ParamType):
    """Custom Click parameter type for output format."""

    name = "format"

    def convert(
        self,
        value: Any,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> OutputFormat:
        if isinstance(value, OutputFormat):
            return value
        try:
            return OutputFormat(value.lower())
        except ValueError:
            self.fail(
                f"Invalid format '{value}'. Choose from: table, json, yaml, raw",
                param,
                ctx,
            )


OUTPUT_FORMAT = OutputFormatType()


def print_version(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console = Console()
    console.print(f"deploywait version {__version__}")
    ctx.exit()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "-p",
    "--profile",
    metavar="NAME",
    envvar="DEPLOYWAIT_PROFILE",
    help="Configuration profile to use",
)
@click.option(
    "-o",
    "--output",
    "output_format",
    type=OUTPUT_FORMAT,
    metavar="FORMAT",
    help="Output format: table, json, yaml, raw",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for info, -vvv for debug)",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Suppress non-essential output",
)
@click.option(
    "--no-color",
    is_flag=True,
    help="Disable colored output",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True),
    metavar="FILE",
    envvar="DEPLOYWAIT_CONFIG",
    help="Path to config file",
)
@click.option(
    "--version",
    is_flag=True,
    callback=print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit",
)
@click.pass_context
def cli(
    ctx: click.Context,
    profile: str | None,
    output_format: OutputFormat | None,
    verbose: int,
    quiet: bool,
    no_color: bool,
    config_file: str | None,
) -> None:
    """deploywait - block a pipeline until a Netlify deploy is live.

    Polls the Netlify API until the deploy of a commit exists, has
    finished building, and its url answers.

    \b
    Examples:
        deploywait wait --site-id my-site
        deploywait wait --site-id my-site --context production
        deploywait config

    \b
    Configuration:
        ~/.deploywait/config.yaml    User configuration
        ./deploywait.yaml            Project configuration
        NETLIFY_AUTH_TOKEN           API token
        INPUT_SITE_ID, INPUT_CONTEXT GitHub Actions inputs
    """
    try:
        config = load_config(config_file)
        # Fail early on an unknown profile
        config.get_profile(profile)

        ctx.obj = DeployWaitContext(
            config=config,
            profile=profile,
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            color=not no_color,
        )

    except ConfigError as e:
        console = Console(stderr=True)
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)


def register_commands() -> None:
    """Register all commands."""
    from deploywait.commands.wait import wait

    cli.add_command(wait)


register_commands()


@cli.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    deploywait_ctx: DeployWaitContext = ctx.obj
    profile = deploywait_ctx.profile
    policies = profile.wait.get_policies()
    config_data = {
        "profile": deploywait_ctx.profile_name,
        "output_format": deploywait_ctx.output_format.value,
        "verbose": deploywait_ctx.verbose,
        "netlify": {
            "api_url": profile.netlify.get_api_url(),
            "timeout": profile.netlify.timeout,
            "has_auth_token": bool(profile.netlify.get_auth_token()),
        },
        "wait": {
            "site_id": profile.wait.get_site_id(),
            "context": profile.wait.get_context() or "any",
            "lookup": f"every {policies.lookup.delay:g}s for {policies.lookup.timeout:g}s",
            "ready": f"every {policies.ready.delay:g}s for {policies.ready.timeout:g}s",
            "reachability": (
                f"every {policies.reachability.delay:g}s for {policies.reachability.timeout:g}s"
            ),
        },
        "pipeline": {
            "actions": deploywait_ctx.pipeline.actions,
            "event": deploywait_ctx.pipeline.event_name,
        },
    }
    deploywait_ctx.output.print_data(config_data, title="Current Configuration")


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except DeployWaitError as e:
        console = Console(stderr=True)
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console = Console(stderr=True)
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
