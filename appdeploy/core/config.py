"""
Configuration management.
"""

import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

TOOL_NAME = "WinAppDeployCmd.exe"
TOOL_SUBPATH = ("Windows Kits", "10", "bin", "x86", TOOL_NAME)

# Checked in order; the 32-bit Program Files wins when both are set.
PROGRAM_FILES_VARS = ("ProgramFiles(x86)", "ProgramFiles")

CONFIG_FILE_NAME = ".appdeploy.yaml"


def default_tool_path(environ: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """
    Locate WinAppDeployCmd.exe under the Windows 10 SDK.

    Args:
        environ: Environment to read (defaults to os.environ)

    Returns:
        Path to the tool, or None when neither Program Files variable is set
    """
    env = os.environ if environ is None else environ
    for var in PROGRAM_FILES_VARS:
        root = env.get(var)
        if root:
            return Path(root).joinpath(*TOOL_SUBPATH)
    return None


def load_config_file() -> dict[str, Any]:
    """
    Load optional config from ~/.appdeploy.yaml or ./.appdeploy.yaml.
    Returns dict with output_dir, verbose, timeout, tool_path, default_target.
    Missing keys are omitted so callers can use their own defaults.
    """
    result: dict[str, Any] = {}
    candidates = [
        Path.home() / CONFIG_FILE_NAME,
        Path.cwd() / CONFIG_FILE_NAME,
    ]
    raw: dict[str, Any] = {}
    for path in candidates:
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    raw = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Ignoring unreadable config file {path}: {e}")
                raw = {}
            break
    if not isinstance(raw, dict) or not raw:
        return result
    if "output_dir" in raw:
        result["output_dir"] = Path(raw["output_dir"]).expanduser().resolve()
    if "tool_path" in raw:
        result["tool_path"] = Path(raw["tool_path"]).expanduser()
    if "verbose" in raw:
        result["verbose"] = bool(raw["verbose"])
    if "timeout" in raw:
        try:
            result["timeout"] = int(raw["timeout"])
        except (TypeError, ValueError):
            logger.warning(f"Ignoring invalid timeout in config file: {raw['timeout']!r}")
    if raw.get("default_target"):
        result["default_target"] = str(raw["default_target"])
    return result


class EnvSettings(BaseSettings):
    """Overrides read from APPDEPLOY_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="APPDEPLOY_")

    output_dir: Optional[Path] = None
    tool_path: Optional[Path] = None
    verbose: Optional[bool] = None
    timeout: Optional[int] = None
    default_target: Optional[str] = None


def load_settings() -> dict[str, Any]:
    """Config file values with environment overrides applied on top."""
    settings = load_config_file()
    try:
        overrides = EnvSettings()
    except ValidationError as e:
        invalid = set()
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else ""
            invalid.add(field)
            logger.warning(f"Ignoring invalid APPDEPLOY_{field.upper()}: {error['msg']}")
        # Init values win over the environment, so this drops only the bad fields.
        overrides = EnvSettings(**{field: None for field in invalid if field})
    settings.update(overrides.model_dump(exclude_none=True))
    return settings


class AppConfig(BaseModel):
    """Application configuration."""

    output_dir: Path = Field(default=Path("output"))
    verbose: bool = False
    timeout: int = 30
    tool_path: Optional[Path] = None
    default_target: Optional[str] = None

    @field_validator('output_dir', mode='before')
    @classmethod
    def validate_output_dir(cls, v):
        """Validate and convert output_dir to Path."""
        if v is None:
            return Path("output")
        if isinstance(v, str):
            return Path(v)
        if isinstance(v, Path):
            return v
        return Path("output")

    def model_post_init(self, __context):
        """Ensure output directory exists and is resolved to absolute path."""
        self.output_dir = self.output_dir.resolve()
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @property
    def resolved_tool_path(self) -> Optional[Path]:
        """Configured tool path, or the Windows SDK default."""
        if self.tool_path is not None:
            return self.tool_path
        return default_tool_path()

    @property
    def history_file(self) -> Path:
        return self.output_dir / "deployments.csv"
