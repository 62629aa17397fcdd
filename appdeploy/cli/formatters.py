"""
Rich formatting utilities for CLI output.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from appdeploy.core.detector import MissingTool, SystemInfo
from appdeploy.deploy.models import DeviceRecord


def print_system_info(system_info: SystemInfo, console: Console) -> None:
    """Print detected system information."""
    table = Table(title="System Information", show_header=False, box=None)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Operating System", system_info.os_type)
    table.add_row("Platform", system_info.platform)
    table.add_row("Python Version", system_info.python_version)
    table.add_row("Hostname", system_info.hostname)

    console.print()
    console.print(table)
    console.print()


def print_tool_status(
    tool_path: Optional[Path],
    missing: Optional[MissingTool],
    console: Console,
) -> None:
    """Print whether WinAppDeployCmd is available."""
    if missing is None:
        console.print(f"[bold green]✓ WinAppDeployCmd found:[/bold green] {tool_path}")
        return

    console.print("\n[bold yellow]⚠️  Missing Tools:[/bold yellow]")
    console.print(f"  • {missing.name}: {escape(missing.suggestion)}")


def format_devices(devices: Sequence[DeviceRecord], console: Console) -> None:
    """Display enumerated devices as a table."""
    if not devices:
        console.print("[yellow]No devices found.[/yellow]")
        console.print("[dim]Check that the device is on the same network and has Developer Mode enabled.[/dim]")
        return

    table = Table(title="Devices", show_header=True)
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Name", style="white")
    table.add_column("IP", style="green")
    table.add_column("GUID", style="dim")

    for device in devices:
        table.add_row(str(device.index), escape(device.name), device.ip, device.guid)

    console.print()
    console.print(table)


def format_device(device: DeviceRecord, console: Console) -> None:
    """Display a single resolved device."""
    content = "\n".join([
        f"[bold]Name:[/bold] {escape(device.name)}",
        f"[bold]IP:[/bold] {device.ip}",
        f"[bold]GUID:[/bold] {device.guid}",
        f"[bold]Index:[/bold] {device.index}",
    ])
    console.print()
    console.print(Panel(content, title="✓ Target device", border_style="green", expand=False))


def format_history(rows: List[Dict[str, str]], console: Console) -> None:
    """Display deployment history rows (already ordered newest first)."""
    table = Table(title="Recent deployments", show_header=True)
    table.add_column("Time", style="cyan")
    table.add_column("Operation", style="white")
    table.add_column("Device", style="white")
    table.add_column("Package", style="white")
    table.add_column("Status", style="white")

    for row in rows:
        status = row.get("status", "—")
        color = "green" if status == "success" else "red"
        table.add_row(
            row.get("timestamp", "—")[:19].replace("T", " "),
            row.get("operation", "—"),
            escape(row.get("device", "—")),
            escape(row.get("package", "—")),
            f"[{color}]{status}[/{color}]",
        )

    console.print()
    console.print(table)
