"""Version information for appdeploy."""

__version__ = "1.0.0"
__version_info__ = (1, 0, 0)

# Release information
__author__ = "appdeploy Team"
__license__ = "MIT"
__description__ = "Discover Windows devices and deploy app packages with WinAppDeployCmd"
