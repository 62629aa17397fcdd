"""
Core functionality components.
"""

from appdeploy.core.config import AppConfig, default_tool_path
from appdeploy.core.detector import SystemDetector, SystemInfo
from appdeploy.core.executor import ToolExecutor, CommandResult

__all__ = [
    "AppConfig",
    "default_tool_path",
    "SystemDetector",
    "SystemInfo",
    "ToolExecutor",
    "CommandResult",
]
