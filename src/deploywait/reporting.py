"""Where a wait run reports its exported values or its failure."""

import os
import sys
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TextIO

from deploywait.core.exceptions import ConfigError
from deploywait.core.logging import StructuredLogger, escape_command_data
from deploywait.core.output import OutputFormatter

logger = StructuredLogger("reporting")


class ResultSink(ABC):
    """Receives the outcome of a wait run."""

    @abstractmethod
    def export(self, name: str, value: str) -> None:
        """Publish a named value for later pipeline steps."""
        pass

    @abstractmethod
    def fail(self, message: str) -> None:
        """Report that the run failed."""
        pass

    def flush(self) -> None:
        """Called once after the last export or failure."""
        pass


class ConsoleSink(ResultSink):
    """Print exported values in the configured output format."""

    def __init__(self, output: OutputFormatter):
        self._output = output
        self.values: dict[str, str] = {}
        self.failure: str | None = None

    def export(self, name: str, value: str) -> None:
        self.values[name] = value

    def fail(self, message: str) -> None:
        self.failure = message
        self._output.print_error(message)

    def flush(self) -> None:
        if self.values:
            self._output.print_data(self.values, title="Deploy")


class GitHubActionsSink(ResultSink):
    """Export values the way ``core.exportVariable``/``core.setOutput`` do.

    Each value is appended to the ``GITHUB_ENV`` file, so later steps see it
    as an environment variable, and to the ``GITHUB_OUTPUT`` file as a step
    output. Failures become an ``::error::`` workflow command.
    """

    def __init__(
        self,
        env_file: str | Path | None = None,
        output_file: str | Path | None = None,
        console: OutputFormatter | None = None,
        stream: TextIO | None = None,
    ):
        self._env_file = Path(env_file) if env_file else None
        self._output_file = Path(output_file) if output_file else None
        self._console = console
        self._stream = stream
        self.failed = False

    def export(self, name: str, value: str) -> None:
        os.environ[name] = value
        if self._env_file:
            self._append(self._env_file, name, value)
        if self._output_file:
            self._append(self._output_file, name, value)
        logger.debug("Exported value", name=name)
        if self._console:
            self._console.print_success(f"{name}={value}")

    def fail(self, message: str) -> None:
        self.failed = True
        self._write(f"::error::{escape_command_data(message)}")

    def _write(self, line: str) -> None:
        stream = self._stream or sys.stdout
        stream.write(f"{line}\n")
        stream.flush()

    @staticmethod
    def _append(path: Path, name: str, value: str) -> None:
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        if delimiter in name or delimiter in value:
            raise ConfigError(f"Value for {name} contains the delimiter {delimiter}")
        try:
            with open(path, "a", encoding="utf-8") as f:
                f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        except OSError as e:
            raise ConfigError(f"Cannot write {path}: {e}")


def create_sink(
    actions: bool,
    output: OutputFormatter,
    env_file: str | None = None,
    output_file: str | None = None,
) -> ResultSink:
    """Pick the sink for the current environment."""
    if actions:
        return GitHubActionsSink(env_file, output_file, console=output)
    return ConsoleSink(output)
