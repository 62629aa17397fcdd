"""
Collaborator protocols for DeploymentTool.

DeploymentTool decides what to run; a ProgressReporter decides how a
long-running command is shown to the user, and a WarningSink receives
non-fatal messages. The logging implementations here are used when no
terminal is attached and in tests; the Rich ones live in appdeploy.cli.
"""

from typing import Awaitable, Callable, Protocol, runtime_checkable

from loguru import logger

from appdeploy.core.executor import CommandResult, OutputCallback

# Takes the reporter's output callback, returns the running command.
CommandFactory = Callable[[OutputCallback], Awaitable[CommandResult]]


@runtime_checkable
class ProgressReporter(Protocol):
    """
    Shows progress for a long-running deployment command.

    Implementations:
        - LoggingProgressReporter: loguru only
        - RichProgressReporter: spinner on the terminal (appdeploy.cli.progress)
    """

    async def track(
        self,
        description: str,
        command: CommandFactory,
        verbose: bool = False,
    ) -> CommandResult:
        """
        Start ``command`` and report on it until it completes.

        Args:
            description: Human-readable text, e.g. "Installing app to Lumia 950"
            command: Factory that starts the command given an output callback
            verbose: Surface every output line instead of just the latest

        Returns:
            The CommandResult of the finished command, successful or not
        """
        ...


@runtime_checkable
class WarningSink(Protocol):
    """Receives user-facing warnings. Fire and forget."""

    def warn(self, message: str) -> None:
        ...


class LoggingProgressReporter:
    """Reports command progress through loguru."""

    async def track(
        self,
        description: str,
        command: CommandFactory,
        verbose: bool = False,
    ) -> CommandResult:
        logger.info(description)

        def _on_output(line: str) -> None:
            if verbose and line.strip():
                logger.info(line)

        result = await command(_on_output)

        if result.success:
            logger.success(f"{description}: done ({result.duration:.1f}s)")
        else:
            logger.error(f"{description}: failed (exit code {result.return_code})")
        return result


class LoggingWarningSink:
    """Sends warnings to loguru."""

    def warn(self, message: str) -> None:
        logger.warning(message)
