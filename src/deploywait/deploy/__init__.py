"""Deploy wait stages and orchestration."""

from deploywait.deploy.models import (
    Deploy,
    DeployContext,
    DeployState,
    WaitInputs,
    WaitResult,
    TERMINAL_STATES,
)

__all__ = [
    "Deploy",
    "DeployContext",
    "DeployState",
    "WaitInputs",
    "WaitResult",
    "TERMINAL_STATES",
]
