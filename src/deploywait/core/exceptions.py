"""Custom exceptions for deploywait."""

from typing import Any


class DeployWaitError(Exception):
    """Base exception for all deploywait errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigError(DeployWaitError):
    """Configuration-related errors."""

    pass


class AuthenticationError(DeployWaitError):
    """Authentication/authorization errors."""

    pass


class NetlifyError(DeployWaitError):
    """Netlify API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class DeployNotReadyError(DeployWaitError):
    """The awaited condition does not hold yet."""

    pass


class WaitTimeoutError(DeployWaitError):
    """A wait stage ran out of attempts."""

    def __init__(
        self,
        message: str,
        timeout_seconds: int | None = None,
        stage: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.timeout_seconds = timeout_seconds
        self.stage = stage
