"""Shared fixtures."""
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from loguru import logger

from appdeploy.core.executor import CommandResult

DEVICES_OUTPUT = (
    "Windows App Deployment Tool\r\n"
    "Version 10.0.0.0\r\n"
    "Copyright (c) Microsoft Corporation. All rights reserved.\r\n"
    "\r\n"
    "Discovering devices...\r\n"
    "IP Address      GUID                                    Model/Name\r\n"
    "127.0.0.1   00000015-b21e-0da9-0000-000000000000    Lumia 1520 (RM-940)\r\n"
    "10.0.0.5   0ad2a3c1-4e2f-4a55-9c1b-3b7c4c5d6e7f    Emulator 10.0.14393.0 WVGA 4 inch 512MB (emulator)\r\n"
    "Done.\r\n"
)


def make_result(stdout: str = "", return_code: int = 0, stderr: str = "") -> CommandResult:
    return CommandResult(
        command="WinAppDeployCmd.exe",
        return_code=return_code,
        stdout=stdout,
        stderr=stderr,
        duration=0.5,
        success=(return_code == 0),
    )


@pytest.fixture
def tool_file(tmp_path) -> Path:
    path = tmp_path / "WinAppDeployCmd.exe"
    path.touch()
    return path


@pytest.fixture
def fake_executor():
    """Executor double: enumeration returns DEVICES_OUTPUT, streams succeed."""
    executor = MagicMock()
    executor.run_command = AsyncMock(return_value=make_result(DEVICES_OUTPUT))
    executor.stream_command = AsyncMock(return_value=make_result("Deployment complete"))
    return executor


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Keep user config files and APPDEPLOY_* variables out of the test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    for var in ("OUTPUT_DIR", "TOOL_PATH", "VERBOSE", "TIMEOUT", "DEFAULT_TARGET"):
        monkeypatch.delenv(f"APPDEPLOY_{var}", raising=False)
    monkeypatch.chdir(tmp_path)
    yield tmp_path
    logger.remove()
