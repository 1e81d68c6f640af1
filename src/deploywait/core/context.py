"""Click context object for sharing state across commands."""

from __future__ import annotations

import click

from deploywait.config import DeployWaitConfig, ProfileConfig, get_default_config
from deploywait.core.output import OutputFormat, OutputFormatter
from deploywait.core.logging import LogLevel, setup_logging
from deploywait.pipeline import PipelineContext


class DeployWaitContext:
    """Shared context object for deploywait commands.

    This object is passed through Click's context mechanism and provides
    access to configuration, the pipeline environment and output.
    """

    def __init__(
        self,
        config: DeployWaitConfig | None = None,
        profile: str | None = None,
        output_format: OutputFormat | None = None,
        verbose: int = 0,
        quiet: bool = False,
        color: bool = True,
        pipeline: PipelineContext | None = None,
    ):
        self._config = config or get_default_config()
        self._profile_name = profile or "default"
        self._pipeline = pipeline or PipelineContext()

        # Output settings (CLI overrides config)
        self._output_format = output_format or self._config.global_settings.output_format
        self._verbose = verbose
        if self._config.global_settings.color == "never":
            color = False

        # Determine log level from verbosity
        if verbose >= 3:
            log_level = LogLevel.DEBUG
        elif verbose >= 1:
            log_level = LogLevel.INFO
        elif quiet:
            log_level = LogLevel.ERROR
        else:
            log_level = self._config.global_settings.verbosity

        setup_logging(log_level, rich_output=color, actions=self._pipeline.actions)

        self._output = OutputFormatter(
            format=self._output_format,
            color=color,
            quiet=quiet,
        )

    @property
    def config(self) -> DeployWaitConfig:
        """Get the loaded configuration."""
        return self._config

    @property
    def profile(self) -> ProfileConfig:
        """Get the current profile configuration."""
        return self._config.get_profile(self._profile_name)

    @property
    def profile_name(self) -> str:
        """Get the current profile name."""
        return self._profile_name

    @property
    def pipeline(self) -> PipelineContext:
        """Get the CI pipeline environment."""
        return self._pipeline

    @property
    def output(self) -> OutputFormatter:
        """Get the output formatter."""
        return self._output

    @property
    def output_format(self) -> OutputFormat:
        """Get the output format."""
        return self._output_format

    @property
    def verbose(self) -> int:
        """Get verbosity level."""
        return self._verbose


# Click decorator for passing context
pass_context = click.make_pass_decorator(DeployWaitContext, ensure=True)
