"""Tests for the Typer CLI with a mocked deployment tool."""
import json

import pytest
from rich.console import Console
from typer.testing import CliRunner

from appdeploy import __version__
from appdeploy.cli import main as cli_main
from appdeploy.cli.progress import ConsoleWarningSink, RichProgressReporter
from appdeploy.deploy.tool import DeploymentTool
from appdeploy.storage.csv_handler import CSVHandler

from conftest import make_result

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Avoid table wrapping at the default 80 columns."""
    monkeypatch.setattr(cli_main, "console", Console(width=200, color_system=None))


@pytest.fixture
def out_dir(isolated_env):
    return isolated_env / "out"


@pytest.fixture
def tool(isolated_env, tool_file, fake_executor, monkeypatch):
    deployment_tool = DeploymentTool(
        tool_file,
        RichProgressReporter(cli_main.console),
        ConsoleWarningSink(cli_main.console),
        executor=fake_executor,
    )
    monkeypatch.setattr(cli_main, "_build_tool", lambda config: deployment_tool)
    return deployment_tool


@pytest.fixture
def package(isolated_env):
    path = isolated_env / "App_1.0.0.0_x86.appx"
    path.write_bytes(b"appx")
    return path


def test_version():
    result = runner.invoke(cli_main.app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_devices_json(tool, out_dir):
    result = runner.invoke(cli_main.app, ["devices", "-o", str(out_dir), "--format", "json"])
    assert result.exit_code == 0, result.output
    devices = json.loads(result.stdout)
    assert [d["index"] for d in devices] == [0, 1]
    assert devices[0]["name"] == "Lumia 1520 (RM-940)"
    assert devices[1]["ip"] == "10.0.0.5"


def test_devices_table(tool, out_dir):
    result = runner.invoke(cli_main.app, ["devices", "-o", str(out_dir)])
    assert result.exit_code == 0, result.output
    assert "Lumia 1520" in result.output
    assert "127.0.0.1" in result.output


def test_devices_tool_failure(tool, fake_executor, out_dir):
    fake_executor.run_command.return_value = make_result(return_code=2, stderr="access denied")
    result = runner.invoke(cli_main.app, ["devices", "-o", str(out_dir)])
    assert result.exit_code == 1
    assert "access denied" in result.output


def test_find_emulator(tool, out_dir):
    result = runner.invoke(cli_main.app, ["find", "emulator", "-o", str(out_dir), "--format", "json"])
    assert result.exit_code == 0, result.output
    device = json.loads(result.stdout)
    assert device["guid"] == "0ad2a3c1-4e2f-4a55-9c1b-3b7c4c5d6e7f"


def test_find_unknown_guid(tool, out_dir):
    result = runner.invoke(cli_main.app, ["find", "ffff-ffff", "-o", str(out_dir)])
    assert result.exit_code == 1
    assert "No devices found" in result.output


def test_missing_tool(isolated_env, out_dir):
    missing = isolated_env / "nowhere" / "WinAppDeployCmd.exe"
    result = runner.invoke(cli_main.app, ["devices", "-o", str(out_dir), "--tool-path", str(missing)])
    assert result.exit_code == 1
    assert "Missing Tools" in result.output


def test_install_defaults_to_first_device(tool, fake_executor, tool_file, package, out_dir):
    result = runner.invoke(cli_main.app, ["install", str(package), "-o", str(out_dir), "--pin", "1234"])
    assert result.exit_code == 0, result.output

    command = fake_executor.stream_command.await_args.args[0]
    assert command == [
        str(tool_file), "install", "-file", str(package), "-ip", "127.0.0.1", "-pin", "1234",
    ]
    assert "Installing app to Lumia 1520 (RM-940)" in result.output

    rows = CSVHandler(out_dir / "deployments.csv").read_results()
    assert len(rows) == 1
    assert rows[0]["operation"] == "install"
    assert rows[0]["status"] == "success"


def test_install_update_with_launch_warning(tool, fake_executor, package, out_dir):
    result = runner.invoke(
        cli_main.app,
        ["install", str(package), "-t", "emulator", "--update", "--launch", "-o", str(out_dir)],
    )
    assert result.exit_code == 0, result.output
    assert "Cannot launch app" in result.output

    command = fake_executor.stream_command.await_args.args[0]
    assert command[1] == "update"
    assert command[command.index("-ip") + 1] == "10.0.0.5"


def test_install_failure_is_recorded(tool, fake_executor, package, out_dir):
    fake_executor.stream_command.return_value = make_result("Error: DEP0001", return_code=1)
    result = runner.invoke(cli_main.app, ["install", str(package), "-t", "device", "-o", str(out_dir)])
    assert result.exit_code == 1

    rows = CSVHandler(out_dir / "deployments.csv").read_results()
    assert rows[0]["status"] == "failure"
    assert "DEP0001" in rows[0]["details"]


def test_install_missing_package(tool, isolated_env, out_dir):
    result = runner.invoke(cli_main.app, ["install", str(isolated_env / "missing.appx"), "-o", str(out_dir)])
    assert result.exit_code == 1
    assert "Package not found" in result.output


def test_uninstall_by_guid(tool, fake_executor, tool_file, out_dir):
    result = runner.invoke(
        cli_main.app,
        ["uninstall", "MyApp_1.0.0.0_x86__abc", "-t", "00000015-b21e-0da9-0000-000000000000", "-o", str(out_dir)],
    )
    assert result.exit_code == 0, result.output

    command = fake_executor.stream_command.await_args.args[0]
    assert command == [
        str(tool_file), "uninstall", "-package", "MyApp_1.0.0.0_x86__abc", "-ip", "127.0.0.1",
    ]


def test_history_newest_first(tool, package, out_dir):
    runner.invoke(cli_main.app, ["install", str(package), "-t", "device", "-o", str(out_dir)])
    runner.invoke(cli_main.app, ["uninstall", "MyApp", "-t", "device", "-o", str(out_dir)])

    result = runner.invoke(cli_main.app, ["history", "-o", str(out_dir), "-n", "1"])
    assert result.exit_code == 0, result.output
    assert "uninstall" in result.output
    assert "App_1.0.0.0_x86.appx" not in result.output


def test_history_without_file(isolated_env, out_dir):
    result = runner.invoke(cli_main.app, ["history", "-o", str(out_dir)])
    assert result.exit_code == 0
    assert "No deployment history" in result.output


def test_check_with_tool(isolated_env, tool_file):
    result = runner.invoke(cli_main.app, ["check", "--tool-path", str(tool_file)])
    assert result.exit_code == 0, result.output
    assert "WinAppDeployCmd found" in result.output


def test_output_option_beats_environment(tool, isolated_env, package, out_dir, monkeypatch):
    env_out = isolated_env / "env_out"
    monkeypatch.setenv("APPDEPLOY_OUTPUT_DIR", str(env_out))

    result = runner.invoke(cli_main.app, ["install", str(package), "-t", "device", "-o", str(out_dir)])
    assert result.exit_code == 0, result.output
    assert (out_dir / "deployments.csv").exists()
    assert not (env_out / "deployments.csv").exists()


def test_output_dir_from_environment(tool, isolated_env, package, monkeypatch):
    env_out = isolated_env / "env_out"
    monkeypatch.setenv("APPDEPLOY_OUTPUT_DIR", str(env_out))

    result = runner.invoke(cli_main.app, ["install", str(package), "-t", "device"])
    assert result.exit_code == 0, result.output
    assert (env_out / "deployments.csv").exists()


def test_tool_path_option_beats_environment(isolated_env, tool_file, out_dir, monkeypatch):
    monkeypatch.setenv("APPDEPLOY_TOOL_PATH", str(tool_file))
    missing = isolated_env / "nowhere" / "WinAppDeployCmd.exe"

    result = runner.invoke(cli_main.app, ["devices", "-o", str(out_dir), "--tool-path", str(missing)])
    assert result.exit_code == 1
    assert "Missing Tools" in result.output


def test_tool_path_from_environment(isolated_env, tool_file, out_dir, monkeypatch):
    monkeypatch.setenv("APPDEPLOY_TOOL_PATH", str(tool_file))

    result = runner.invoke(cli_main.app, ["check"])
    assert result.exit_code == 0, result.output
    assert "WinAppDeployCmd found" in result.output


def test_default_target_from_environment(tool, fake_executor, package, out_dir, monkeypatch):
    monkeypatch.setenv("APPDEPLOY_DEFAULT_TARGET", "emulator")

    result = runner.invoke(cli_main.app, ["install", str(package), "-o", str(out_dir)])
    assert result.exit_code == 0, result.output

    command = fake_executor.stream_command.await_args.args[0]
    assert command[command.index("-ip") + 1] == "10.0.0.5"


def test_target_option_beats_default_target(tool, fake_executor, package, out_dir, monkeypatch):
    monkeypatch.setenv("APPDEPLOY_DEFAULT_TARGET", "emulator")

    result = runner.invoke(cli_main.app, ["install", str(package), "-t", "device", "-o", str(out_dir)])
    assert result.exit_code == 0, result.output

    command = fake_executor.stream_command.await_args.args[0]
    assert command[command.index("-ip") + 1] == "127.0.0.1"


def test_default_target_from_config_file(tool, fake_executor, isolated_env, package, out_dir):
    (isolated_env / ".appdeploy.yaml").write_text("default_target: emulator\n", encoding="utf-8")

    result = runner.invoke(cli_main.app, ["install", str(package), "-o", str(out_dir)])
    assert result.exit_code == 0, result.output

    command = fake_executor.stream_command.await_args.args[0]
    assert command[command.index("-ip") + 1] == "10.0.0.5"
