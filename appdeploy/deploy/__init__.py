"""
Device discovery and app deployment through WinAppDeployCmd.

Public API:
    - DeploymentTool: enumerate, resolve, install, uninstall
    - DeviceRecord: one enumerated device
    - ProgressReporter, WarningSink: collaborator protocols
    - DeploymentError and subclasses
"""

from .base import (
    LoggingProgressReporter,
    LoggingWarningSink,
    ProgressReporter,
    WarningSink,
)
from .exceptions import (
    DeploymentError,
    DeviceNotFoundError,
    ToolExecutionError,
    ToolNotAvailableError,
)
from .models import DeviceRecord
from .parser import parse_device_line, parse_devices_output
from .tool import DeploymentTool

__all__ = [
    # Protocols and default collaborators
    "ProgressReporter",
    "WarningSink",
    "LoggingProgressReporter",
    "LoggingWarningSink",

    # Types
    "DeviceRecord",

    # Parsing
    "parse_device_line",
    "parse_devices_output",

    # Exceptions
    "DeploymentError",
    "DeviceNotFoundError",
    "ToolExecutionError",
    "ToolNotAvailableError",

    # Implementation
    "DeploymentTool",
]
