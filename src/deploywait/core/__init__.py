"""Core utilities and shared components for deploywait."""

# Note: Import context lazily to avoid circular imports
# Use: from deploywait.core.context import DeployWaitContext, pass_context
from deploywait.core.exceptions import (
    DeployWaitError,
    ConfigError,
    NetlifyError,
    DeployNotReadyError,
    WaitTimeoutError,
)
from deploywait.core.output import OutputFormatter

__all__ = [
    "DeployWaitError",
    "ConfigError",
    "NetlifyError",
    "DeployNotReadyError",
    "WaitTimeoutError",
    "OutputFormatter",
]
