"""
Command execution engine.

Both modes run the process through asyncio: ``run_command`` collects the
output once the process exits, ``stream_command`` forwards each output line
as it arrives.
"""

import asyncio
import codecs
import re
import time
from typing import Callable, List, Optional

from loguru import logger
from pydantic import BaseModel

OutputCallback = Callable[[str], None]

STREAM_CHUNK_SIZE = 4096

# Progress output often redraws with a bare \r.
OUTPUT_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class CommandResult(BaseModel):
    """Result of a command execution."""

    command: str
    return_code: int
    stdout: str
    stderr: str
    duration: float
    success: bool


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


class ToolExecutor:
    """Execute the deployment tool and other system commands."""

    def __init__(self, app_logger=logger):
        self.logger = app_logger

    async def run_command(
        self,
        command: List[str],
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """
        Execute a command and capture its output.

        Args:
            command: Command and arguments as a list
            timeout: Timeout in seconds (None waits forever)

        Returns:
            CommandResult object
        """
        start_time = time.time()
        cmd_str = " ".join(command)

        self.logger.info(f"Executing command: {cmd_str}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return self._spawn_failure(cmd_str, start_time, e)

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            duration = time.time() - start_time
            self.logger.error(f"Command timed out after {timeout}s: {cmd_str}")

            return CommandResult(
                command=cmd_str,
                return_code=-1,
                stdout="",
                stderr=f"Command timed out after {timeout} seconds",
                duration=duration,
                success=False,
            )

        return self._completed(cmd_str, start_time, process.returncode, _decode(stdout), _decode(stderr))

    async def stream_command(
        self,
        command: List[str],
        on_output: Optional[OutputCallback] = None,
    ) -> CommandResult:
        """
        Execute a long-running command, forwarding output line by line.

        stderr is merged into stdout. The process is awaited to completion;
        there is no timeout.

        Args:
            command: Command and arguments as a list
            on_output: Called with every output line (line terminator removed)

        Returns:
            CommandResult object with the collected output in ``stdout``
        """
        start_time = time.time()
        cmd_str = " ".join(command)

        self.logger.info(f"Executing command: {cmd_str}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            return self._spawn_failure(cmd_str, start_time, e)

        lines: List[str] = []

        def _emit(line: str) -> None:
            lines.append(line)
            self.logger.debug(line)
            if on_output is not None:
                on_output(line)

        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        pending = ""
        try:
            while True:
                chunk = await process.stdout.read(STREAM_CHUNK_SIZE)
                if not chunk:
                    break
                pending += decoder.decode(chunk)
                # A trailing \r may be the first half of \r\n split across chunks.
                held = "\r" if pending.endswith("\r") else ""
                if held:
                    pending = pending[:-1]
                *complete, pending = OUTPUT_LINE_BREAK.split(pending)
                pending += held
                for line in complete:
                    _emit(line)

            pending += decoder.decode(b"", final=True)
            remaining = OUTPUT_LINE_BREAK.split(pending)
            if remaining[-1] == "":
                remaining.pop()
            for line in remaining:
                _emit(line)

            return_code = await process.wait()
        finally:
            if process.returncode is None:
                process.kill()
                await process.wait()

        return self._completed(cmd_str, start_time, return_code, "\n".join(lines), "")

    def _completed(
        self,
        cmd_str: str,
        start_time: float,
        return_code: int,
        stdout: str,
        stderr: str,
    ) -> CommandResult:
        duration = time.time() - start_time

        self.logger.info(
            f"Command completed: {cmd_str} "
            f"(return code: {return_code}, duration: {duration:.2f}s)"
        )

        return CommandResult(
            command=cmd_str,
            return_code=return_code,
            stdout=stdout,
            stderr=stderr,
            duration=duration,
            success=(return_code == 0),
        )

    def _spawn_failure(self, cmd_str: str, start_time: float, error: OSError) -> CommandResult:
        duration = time.time() - start_time
        self.logger.error(f"Command failed: {cmd_str} - {error}")

        return CommandResult(
            command=cmd_str,
            return_code=-1,
            stdout="",
            stderr=str(error),
            duration=duration,
            success=False,
        )
