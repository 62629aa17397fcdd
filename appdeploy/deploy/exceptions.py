"""
Deployment exceptions.

Raised by DeploymentTool when a target cannot be resolved or the
deployment tool fails. All of them derive from DeploymentError so the CLI
can catch the family in one place.
"""

from typing import Optional

from appdeploy.core.executor import CommandResult


class DeploymentError(Exception):
    """
    Base class for deployment failures.

    Examples:
        - No device matches the requested target
        - WinAppDeployCmd exited non-zero
        - The Windows SDK could not be located
    """
    pass


class DeviceNotFoundError(DeploymentError):
    """Raised when enumeration or target lookup yields no device."""

    def __init__(self, message: str = "No devices found"):
        super().__init__(message)


class ToolExecutionError(DeploymentError):
    """
    Raised when the deployment tool fails to start or exits non-zero.

    The failing CommandResult is kept on ``result`` for callers that want
    the raw output.
    """

    def __init__(self, result: CommandResult, message: Optional[str] = None):
        self.result = result
        if message is None:
            detail = (result.stderr or result.stdout).strip()
            message = f"Command failed (exit code {result.return_code}): {result.command}"
            if detail:
                message = f"{message}\n{detail}"
        super().__init__(message)


class ToolNotAvailableError(DeploymentError):
    """Raised when no path to WinAppDeployCmd could be resolved."""
    pass
