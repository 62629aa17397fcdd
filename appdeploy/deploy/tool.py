"""
DeploymentTool - discover devices and deploy app packages with WinAppDeployCmd.

Flow: enumerate devices -> resolve a target specifier -> install/uninstall
with progress reported through an injected ProgressReporter.
"""

from pathlib import Path
from typing import List, Optional, Union

from loguru import logger

from appdeploy.core.config import AppConfig
from appdeploy.core.executor import CommandResult, ToolExecutor
from appdeploy.deploy.base import ProgressReporter, WarningSink
from appdeploy.deploy.exceptions import (
    DeviceNotFoundError,
    ToolExecutionError,
    ToolNotAvailableError,
)
from appdeploy.deploy.models import DeviceRecord
from appdeploy.deploy.parser import parse_devices_output

EMULATOR_TARGET = "emulator"
DEVICE_TARGET = "device"

LAUNCH_UNSUPPORTED_WARNING = (
    "Cannot launch app with current version of Windows 10 SDK tools.  "
    "You will have to launch the app after installation is completed."
)


def build_install_args(
    package_path: Union[str, Path],
    device: DeviceRecord,
    should_update: bool = False,
    pin: Optional[str] = None,
) -> List[str]:
    """Arguments for ``WinAppDeployCmd install|update``."""
    args = [
        "update" if should_update else "install",
        "-file",
        str(package_path),
        "-ip",
        device.ip,
    ]
    if pin:
        args.extend(["-pin", pin])
    return args


def build_uninstall_args(package_info: str, device: DeviceRecord) -> List[str]:
    """Arguments for ``WinAppDeployCmd uninstall``. PINs are install-only."""
    return ["uninstall", "-package", package_info, "-ip", device.ip]


class DeploymentTool:
    """
    Wraps WinAppDeployCmd.exe.

    The tool path is fixed at construction; every call spawns a fresh
    process and nothing is cached between calls.
    """

    def __init__(
        self,
        tool_path: Optional[Path],
        reporter: ProgressReporter,
        warnings: WarningSink,
        executor: Optional[ToolExecutor] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the deployment tool.

        Args:
            tool_path: Path to WinAppDeployCmd.exe (None if it could not be located)
            reporter: Shows progress for install/uninstall
            warnings: Receives non-fatal user-facing warnings
            executor: Runs the tool (default: ToolExecutor with the shared logger)
            timeout: Timeout in seconds for device enumeration
        """
        self.path = tool_path
        self.reporter = reporter
        self.warnings = warnings
        self.executor = executor or ToolExecutor(logger)
        self.timeout = timeout

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        reporter: ProgressReporter,
        warnings: WarningSink,
        executor: Optional[ToolExecutor] = None,
    ) -> "DeploymentTool":
        return cls(
            config.resolved_tool_path,
            reporter,
            warnings,
            executor=executor,
            timeout=config.timeout,
        )

    @property
    def is_available(self) -> bool:
        """Whether WinAppDeployCmd.exe exists at the configured path."""
        return self.path is not None and self.path.exists()

    def _command(self, args: List[str]) -> List[str]:
        if self.path is None:
            raise ToolNotAvailableError(
                "Cannot locate WinAppDeployCmd.exe: neither ProgramFiles(x86) nor "
                "ProgramFiles is set and no tool path is configured"
            )
        return [str(self.path), *args]

    async def enumerate_devices(self) -> List[DeviceRecord]:
        """
        List the devices WinAppDeployCmd can currently see.

        Returns:
            Devices in the order the tool printed them

        Raises:
            ToolExecutionError: If the tool fails to start or exits non-zero
            ToolNotAvailableError: If no tool path is configured
        """
        result = await self.executor.run_command(self._command(["devices"]), timeout=self.timeout)
        if not result.success:
            raise ToolExecutionError(result)

        devices = parse_devices_output(result.stdout)
        logger.debug(f"Enumerated {len(devices)} device(s)")
        return devices

    async def find_device(self, target: str) -> DeviceRecord:
        """
        Resolve a target specifier to a device.

        Args:
            target: "emulator", "device", or a device GUID

        Returns:
            The matching DeviceRecord

        Raises:
            DeviceNotFoundError: If nothing was enumerated or nothing matches
        """
        devices = await self.enumerate_devices()

        if not devices:
            raise DeviceNotFoundError()

        if target == EMULATOR_TARGET:
            # Longest display text first, then the first one naming an emulator.
            by_length = sorted(devices, key=lambda d: len(d.display_text), reverse=True)
            for device in by_length:
                if EMULATOR_TARGET in device.display_text:
                    return device
            raise DeviceNotFoundError()

        if target == DEVICE_TARGET:
            return devices[0]

        candidates = [device for device in devices if device.guid == target]
        if candidates:
            return candidates[0]
        raise DeviceNotFoundError()

    async def install_app_package(
        self,
        package_path: Union[str, Path],
        device: DeviceRecord,
        should_launch: bool = False,
        should_update: bool = False,
        pin: Optional[str] = None,
        verbose: bool = False,
    ) -> None:
        """
        Install (or update) an app package on a device.

        Args:
            package_path: Path to the built .appx/.appxbundle
            device: Target from find_device
            should_launch: Launch requested; only produces a warning
            should_update: Use ``update`` instead of ``install``
            pin: Pairing PIN for devices that require one
            verbose: Show every line of tool output

        Raises:
            ToolExecutionError: If the tool fails to start or exits non-zero
        """
        text = f"Installing app to {device.name}"

        if should_launch:
            self.warnings.warn(LAUNCH_UNSUPPORTED_WARNING)

        args = build_install_args(package_path, device, should_update=should_update, pin=pin)
        await self._run_with_progress(text, args, verbose)

    async def uninstall_app_package(
        self,
        package_info: str,
        device: DeviceRecord,
        verbose: bool = False,
    ) -> None:
        """
        Uninstall a package from a device.

        Raises:
            ToolExecutionError: If the tool fails to start or exits non-zero
        """
        text = f"Uninstalling app from {device.name}"
        args = build_uninstall_args(package_info, device)
        await self._run_with_progress(text, args, verbose)

    async def _run_with_progress(self, text: str, args: List[str], verbose: bool) -> CommandResult:
        command = self._command(args)

        result = await self.reporter.track(
            text,
            lambda on_output: self.executor.stream_command(command, on_output),
            verbose=verbose,
        )
        if not result.success:
            raise ToolExecutionError(result)
        return result
