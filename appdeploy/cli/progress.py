"""
Rich terminal implementations of the deployment collaborators.
"""

from loguru import logger
from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.spinner import Spinner

from appdeploy.core.executor import CommandResult
from appdeploy.deploy.base import CommandFactory


class RichProgressReporter:
    """Spinner with the latest line of tool output while a command runs."""

    def __init__(self, console: Console):
        self.console = console

    async def track(
        self,
        description: str,
        command: CommandFactory,
        verbose: bool = False,
    ) -> CommandResult:
        spinner = Spinner("dots", text=f"[dim]{escape(description)}…[/dim]")

        with Live(spinner, console=self.console, refresh_per_second=8, transient=True) as live:

            def _on_output(line: str) -> None:
                text = line.strip()
                if not text:
                    return
                if verbose:
                    live.console.print(f"[dim]  {escape(text)}[/dim]")
                spinner.update(text=f"[dim]{escape(description)}… {escape(text)}[/dim]")

            result = await command(_on_output)

        if result.success:
            self.console.print(
                f"[bold green]✓[/bold green] {escape(description)} "
                f"[dim]({result.duration:.1f}s)[/dim]"
            )
        else:
            self.console.print(
                f"[bold red]✗[/bold red] {escape(description)} "
                f"failed (exit code {result.return_code})"
            )
        return result


class ConsoleWarningSink:
    """Prints warnings in yellow and logs them."""

    def __init__(self, console: Console):
        self.console = console

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.console.print(f"[bold yellow]⚠️  {escape(message)}[/bold yellow]")
