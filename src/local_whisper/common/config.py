"""
Configuration for local-whisper.

Values are resolved once at startup, in priority order:
- Environment variables (WHISPER_MODEL, WHISPER_LANGUAGE, WHISPER_CMD)
- User config file: <config dir>/config.yaml, under a `transcribe:` key
- Built-in defaults

Command line flags are applied on top of this by the CLI. The resulting
TranscribeConfig is passed down to each component; nothing below the CLI
reads the environment directly.
"""

import logging
import os
import platform
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from local_whisper.common.errors import ConfigError
from local_whisper.common.models import AUTO, MODEL_SIZES

logger = logging.getLogger(__name__)

APP_DIR_NAME = "LocalWhisper"
CONFIG_FILENAME = "config.yaml"
LOCK_FILENAME = "whisper-transcribe.lock"

ENV_MODEL = "WHISPER_MODEL"
ENV_LANGUAGE = "WHISPER_LANGUAGE"
ENV_WHISPER_CMD = "WHISPER_CMD"


def get_config_dir() -> Path:
    """
    Get platform-specific configuration directory.

    Returns:
        Path to user config directory:
        - Linux: ~/.config/LocalWhisper/
        - Windows: ~/Documents/LocalWhisper/
        - macOS: ~/Library/Application Support/LocalWhisper/
    """
    system = platform.system()

    if system == "Windows":
        config_dir = Path.home() / "Documents" / APP_DIR_NAME
    elif system == "Darwin":
        config_dir = Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    else:
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            config_dir = Path(xdg_config) / APP_DIR_NAME
        else:
            config_dir = Path.home() / ".config" / APP_DIR_NAME

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def default_lock_path() -> Path:
    """Well-known lock file shared by every instance on this machine."""
    return Path(tempfile.gettempdir()) / LOCK_FILENAME


@dataclass(frozen=True)
class TranscribeConfig:
    """Resolved configuration for one run."""

    default_model: str = "small"
    default_language: str = AUTO
    whisper_cmd: str | None = None
    lock_path: Path = field(default_factory=default_lock_path)
    size_threshold_kb: float = 100
    # None keeps the whisper call unbounded
    transcription_timeout: float | None = None
    probe_timeout: float | None = 60
    takeover_wait: float = 0.5

    def __post_init__(self) -> None:
        if self.default_model not in MODEL_SIZES:
            raise ConfigError(
                f"Invalid default model: {self.default_model!r}. "
                f"Choose one of: {', '.join(MODEL_SIZES)}"
            )
        for name in ("default_language", "whisper_cmd"):
            value = getattr(self, name)
            if name == "whisper_cmd" and value is None:
                continue
            if not isinstance(value, str):
                raise ConfigError(f"{name} must be a string, got {value!r}")

        if not isinstance(self.lock_path, (str, os.PathLike)):
            raise ConfigError(f"lock_path must be a path, got {self.lock_path!r}")
        object.__setattr__(self, "lock_path", Path(self.lock_path).expanduser())

        _check_number("size_threshold_kb", self.size_threshold_kb)
        _check_number("takeover_wait", self.takeover_wait)
        _check_number("transcription_timeout", self.transcription_timeout, optional=True)
        _check_number("probe_timeout", self.probe_timeout, optional=True)


def _check_number(name: str, value: Any, optional: bool = False) -> None:
    """Reject non-numeric or negative values; None is allowed when optional."""
    if value is None and optional:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise ConfigError(f"{name} must not be negative")


def _read_config_file(config_path: Path) -> dict[str, Any]:
    """Read the `transcribe:` section of a YAML config file."""
    if not config_path.exists():
        return {}

    try:
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load config {config_path}: {e}")
        return {}

    if not isinstance(loaded, dict):
        logger.warning(f"Ignoring config {config_path}: top level is not a mapping")
        return {}

    section = loaded.get("transcribe") or {}
    if not isinstance(section, dict):
        logger.warning(f"Ignoring config {config_path}: 'transcribe' is not a mapping")
        return {}

    known = {f.name for f in fields(TranscribeConfig)}
    unknown = set(section) - known
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")

    return {key: value for key, value in section.items() if key in known}


def load_config(
    env: Mapping[str, str] | None = None,
    config_path: Path | None = None,
) -> TranscribeConfig:
    """
    Build the configuration for this run.

    Args:
        env: Environment mapping (defaults to os.environ)
        config_path: YAML file to read (defaults to <config dir>/config.yaml)

    Returns:
        Resolved TranscribeConfig

    Raises:
        ConfigError: If a value is invalid
    """
    if env is None:
        env = os.environ
    if config_path is None:
        config_path = get_config_dir() / CONFIG_FILENAME

    values = _read_config_file(config_path)

    if env.get(ENV_MODEL):
        values["default_model"] = env[ENV_MODEL]
    if env.get(ENV_LANGUAGE):
        values["default_language"] = env[ENV_LANGUAGE]
    if env.get(ENV_WHISPER_CMD):
        values["whisper_cmd"] = env[ENV_WHISPER_CMD]

    try:
        config = TranscribeConfig(**values)
    except TypeError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.debug(f"Loaded configuration: {config}")
    return config
