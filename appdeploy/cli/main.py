"""
Main CLI application using Typer.
"""

from __future__ import annotations

import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import NoReturn, Optional, Sequence

import questionary
from questionary import Choice
import typer
from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.spinner import Spinner

from appdeploy.cli.formatters import (
    format_device,
    format_devices,
    format_history,
    print_system_info,
    print_tool_status,
)
from appdeploy.cli.progress import ConsoleWarningSink, RichProgressReporter
from appdeploy.core.config import AppConfig, default_tool_path, load_settings
from appdeploy.core.detector import SystemDetector
from appdeploy.deploy.exceptions import DeploymentError, DeviceNotFoundError
from appdeploy.deploy.models import DeviceRecord
from appdeploy.deploy.tool import DEVICE_TARGET, DeploymentTool
from appdeploy.storage.csv_handler import CSVHandler
from appdeploy.storage.logger import setup_logging

app = typer.Typer(
    name="appdeploy",
    help="Windows device discovery & app deployment tool",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def _init_context(
    output_dir: Optional[Path],
    verbose: bool,
    tool_path: Optional[Path] = None,
):
    """
    Initialize shared objects: config and logger.
    Values given on the command line win over APPDEPLOY_* environment
    variables, which win over ~/.appdeploy.yaml or ./.appdeploy.yaml.
    """
    settings = load_settings()
    resolved_output = output_dir if output_dir is not None else settings.get("output_dir") or Path("output")
    config = AppConfig(
        output_dir=resolved_output,
        verbose=verbose or settings.get("verbose", False),
        timeout=settings.get("timeout", 30),
        tool_path=tool_path if tool_path is not None else settings.get("tool_path"),
        default_target=settings.get("default_target"),
    )

    logger = setup_logging(config.output_dir, config.verbose)
    return config, logger


def _build_tool(config: AppConfig) -> DeploymentTool:
    """Create a DeploymentTool that reports progress on the console."""
    return DeploymentTool.from_config(
        config,
        RichProgressReporter(console),
        ConsoleWarningSink(console),
    )


def _fail(logger, error: Exception) -> NoReturn:
    """Log and print a deployment error, then exit with status 1."""
    logger.error(str(error))
    console.print(f"\n[bold red]✗ {escape(str(error))}[/bold red]")
    raise typer.Exit(1)


def _require_tool(tool: DeploymentTool) -> None:
    """Exit with guidance when WinAppDeployCmd is missing."""
    if tool.is_available:
        return
    missing = SystemDetector().check_deploy_tool(tool.path)
    print_tool_status(tool.path, missing, console)
    raise typer.Exit(1)


def _output_json(payload) -> None:
    typer.echo(json.dumps(payload, indent=2))


def _pick_device(devices: Sequence[DeviceRecord]) -> DeviceRecord:
    """Let the user choose among enumerated devices."""
    if not devices:
        raise DeviceNotFoundError()
    if len(devices) == 1:
        return devices[0]

    choices = [
        Choice(f"{device.display_text} — {device.ip}", value=device.index)
        for device in devices
    ]
    index = questionary.select("Select a target device:", choices=choices).ask()
    if index is None:
        console.print("[yellow]No device selected.[/yellow]")
        raise typer.Exit(1)
    return devices[index]


def _select_device(tool: DeploymentTool, target: Optional[str], config: AppConfig, logger) -> DeviceRecord:
    """
    Resolve the target device.

    An explicit --target or configured default_target goes through
    find_device. Otherwise the user picks from a list, or the first device
    is used when there is no terminal to prompt on.
    """
    target = target or config.default_target
    device: Optional[DeviceRecord] = None
    try:
        with Live(Spinner("dots", text="[dim]Discovering devices…[/dim]"), console=console, refresh_per_second=8, transient=True):
            if target:
                device = asyncio.run(tool.find_device(target))
            elif not sys.stdin.isatty():
                device = asyncio.run(tool.find_device(DEVICE_TARGET))
            else:
                found = asyncio.run(tool.enumerate_devices())
        # questionary runs its own event loop, so prompt after discovery.
        if device is None:
            device = _pick_device(found)
    except DeploymentError as e:
        _fail(logger, e)

    logger.info(f"Target device: {device.display_text} ({device.ip}, {device.guid})")
    console.print(f"[dim]Target: {escape(device.display_text)} at {device.ip}[/dim]")
    return device


@app.callback(invoke_without_command=True)
def _default(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        is_eager=True,
    ),
):
    """
    appdeploy - Windows device discovery & app deployment tool.
    """
    if version:
        from appdeploy import __version__
        console.print(f"appdeploy {__version__}")
        raise typer.Exit(0)
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)


@app.command()
def devices(
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory for logs and history",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    tool_path: Optional[Path] = typer.Option(
        None,
        "--tool-path",
        help="Path to WinAppDeployCmd.exe (default: Windows 10 SDK)",
    ),
    output_format: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format: 'rich' (default) or 'json'",
    ),
):
    """
    List devices visible to WinAppDeployCmd.
    """
    config, logger = _init_context(output_dir, verbose, tool_path)
    tool = _build_tool(config)
    _require_tool(tool)

    try:
        with Live(Spinner("dots", text="[dim]Discovering devices…[/dim]"), console=console, refresh_per_second=8, transient=True):
            found = asyncio.run(tool.enumerate_devices())
    except DeploymentError as e:
        _fail(logger, e)

    if output_format == "json":
        _output_json([device.model_dump(mode="json") for device in found])
    else:
        format_devices(found, console)


@app.command()
def find(
    target: str = typer.Argument(..., help="'emulator', 'device', or a device GUID"),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory for logs and history",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    tool_path: Optional[Path] = typer.Option(
        None,
        "--tool-path",
        help="Path to WinAppDeployCmd.exe (default: Windows 10 SDK)",
    ),
    output_format: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format: 'rich' (default) or 'json'",
    ),
):
    """
    Resolve a target specifier to a single device.
    """
    config, logger = _init_context(output_dir, verbose, tool_path)
    tool = _build_tool(config)
    _require_tool(tool)

    try:
        device = asyncio.run(tool.find_device(target))
    except DeploymentError as e:
        _fail(logger, e)

    if output_format == "json":
        _output_json(device.model_dump(mode="json"))
    else:
        format_device(device, console)


@app.command()
def install(
    package: Path = typer.Argument(..., help="Path to the .appx / .appxbundle to install"),
    target: Optional[str] = typer.Option(
        None,
        "--target",
        "-t",
        help="'emulator', 'device', or a device GUID (prompts when omitted)",
    ),
    launch: bool = typer.Option(
        False,
        "--launch",
        help="Launch the app after installing (not supported by current SDK tools)",
    ),
    update: bool = typer.Option(
        False,
        "--update",
        help="Update an already installed app instead of a fresh install",
    ),
    pin: Optional[str] = typer.Option(
        None,
        "--pin",
        help="PIN for devices that require pairing",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory for logs and history",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    tool_path: Optional[Path] = typer.Option(
        None,
        "--tool-path",
        help="Path to WinAppDeployCmd.exe (default: Windows 10 SDK)",
    ),
):
    """
    Install or update an app package on a device.
    """
    if not package.exists():
        console.print(f"[bold red]✗ Package not found: {escape(str(package))}[/bold red]")
        raise typer.Exit(1)

    config, logger = _init_context(output_dir, verbose, tool_path)
    tool = _build_tool(config)
    _require_tool(tool)

    device = _select_device(tool, target, config, logger)
    operation = "update" if update else "install"
    history = CSVHandler(config.history_file)
    started = datetime.now()

    try:
        asyncio.run(
            tool.install_app_package(
                package,
                device,
                should_launch=launch,
                should_update=update,
                pin=pin,
                verbose=config.verbose,
            )
        )
    except DeploymentError as e:
        history.write_result(operation, device, str(package), "failure", str(e), started)
        _fail(logger, e)

    history.write_result(operation, device, str(package), "success", timestamp=started)


@app.command()
def uninstall(
    package_id: str = typer.Argument(..., help="Package full name to uninstall"),
    target: Optional[str] = typer.Option(
        None,
        "--target",
        "-t",
        help="'emulator', 'device', or a device GUID (prompts when omitted)",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory for logs and history",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    tool_path: Optional[Path] = typer.Option(
        None,
        "--tool-path",
        help="Path to WinAppDeployCmd.exe (default: Windows 10 SDK)",
    ),
):
    """
    Uninstall an app package from a device.
    """
    config, logger = _init_context(output_dir, verbose, tool_path)
    tool = _build_tool(config)
    _require_tool(tool)

    device = _select_device(tool, target, config, logger)
    history = CSVHandler(config.history_file)
    started = datetime.now()

    try:
        asyncio.run(tool.uninstall_app_package(package_id, device, verbose=config.verbose))
    except DeploymentError as e:
        history.write_result("uninstall", device, package_id, "failure", str(e), started)
        _fail(logger, e)

    history.write_result("uninstall", device, package_id, "success", timestamp=started)


@app.command()
def check(
    tool_path: Optional[Path] = typer.Option(
        None,
        "--tool-path",
        help="Path to WinAppDeployCmd.exe (default: Windows 10 SDK)",
    ),
):
    """
    Show system information and whether WinAppDeployCmd is available.
    """
    settings = load_settings()
    if tool_path is None:
        tool_path = settings.get("tool_path") or default_tool_path()

    detector = SystemDetector()
    print_system_info(detector.detect_system(), console)

    missing = detector.check_deploy_tool(tool_path)
    print_tool_status(tool_path, missing, console)
    if missing is not None:
        raise typer.Exit(1)


@app.command()
def history(
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory where history is stored (default: output)",
    ),
    limit: int = typer.Option(
        10,
        "--limit",
        "-n",
        help="Maximum number of deployments to show",
    ),
):
    """
    Show the last N deployments.
    """
    settings = load_settings()
    out = output_dir if output_dir is not None else settings.get("output_dir") or Path("output")
    history_file = Path(out) / "deployments.csv"
    if not history_file.exists():
        console.print(f"[yellow]No deployment history at {history_file}[/yellow]")
        return

    rows = CSVHandler(history_file).read_results()
    if not rows:
        console.print("[dim]No deployments recorded.[/dim]")
        return

    format_history(list(reversed(rows))[:limit], console)
