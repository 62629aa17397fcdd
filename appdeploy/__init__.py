"""
appdeploy - Windows device discovery & app deployment tool
"""

from appdeploy.__version__ import __version__
from appdeploy.core.config import AppConfig
from appdeploy.deploy.models import DeviceRecord
from appdeploy.deploy.tool import DeploymentTool

__all__ = [
    "AppConfig",
    "DeploymentTool",
    "DeviceRecord",
    "__version__",
]
