"""
System and tool detection.
"""

import platform
import socket
import sys
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from appdeploy.core.config import TOOL_NAME


class SystemInfo(BaseModel):
    """System information model."""

    os_type: str  # 'Linux', 'Darwin', 'Windows'
    platform: str
    python_version: str
    hostname: str


class MissingTool(BaseModel):
    """Information about a missing tool."""

    name: str
    suggestion: str


class SystemDetector:
    """Detect system information and deployment tool availability."""

    def detect_system(self) -> SystemInfo:
        """Detect current system information."""
        return SystemInfo(
            os_type=platform.system(),
            platform=platform.platform(),
            python_version=sys.version.split()[0],
            hostname=socket.gethostname(),
        )

    def check_deploy_tool(self, tool_path: Optional[Path]) -> Optional[MissingTool]:
        """Return None if the tool exists, otherwise a MissingTool with advice."""
        if tool_path is not None and tool_path.exists():
            return None

        return MissingTool(
            name=TOOL_NAME,
            suggestion=self._get_installation_suggestion(tool_path, platform.system()),
        )

    def _get_installation_suggestion(self, tool_path: Optional[Path], os_type: str) -> str:
        """Get installation suggestion for the deployment tool."""
        if os_type != "Windows":
            return f"{TOOL_NAME} only runs on Windows; run appdeploy from a Windows host"

        if tool_path is None:
            return (
                "Could not locate Program Files; set APPDEPLOY_TOOL_PATH "
                "or tool_path in .appdeploy.yaml"
            )

        return (
            f"Not found at {tool_path}. Install the Windows 10 SDK "
            "(https://developer.microsoft.com/windows/downloads/windows-sdk/)"
        )
