"""
Locate the whisper executable.

Resolution order, first match wins:
1. Explicit override (WHISPER_CMD, carried on the config), used verbatim
2. PATH lookup
3. Conventional install locations

Nothing is cached; each call resolves again.
"""

import logging
import shutil
from pathlib import Path

from local_whisper.common.config import TranscribeConfig

logger = logging.getLogger(__name__)

WHISPER_COMMAND = "whisper"


def get_common_paths() -> list[Path]:
    """Standard install locations checked after PATH, in order."""
    home = Path.home()
    return [
        Path("/usr/bin") / WHISPER_COMMAND,
        Path("/usr/local/bin") / WHISPER_COMMAND,
        home / ".local" / "bin" / WHISPER_COMMAND,
        home / ".nix-profile" / "bin" / WHISPER_COMMAND,
    ]


def find_whisper_binary(
    config: TranscribeConfig,
    common_paths: list[Path] | None = None,
) -> str | None:
    """
    Find the whisper executable.

    Args:
        config: Run configuration (whisper_cmd is the explicit override)
        common_paths: Fallback locations (defaults to get_common_paths())

    Returns:
        Path to the executable, or None if it cannot be found
    """
    if config.whisper_cmd:
        logger.debug(f"Using whisper override: {config.whisper_cmd}")
        return config.whisper_cmd

    on_path = shutil.which(WHISPER_COMMAND)
    if on_path:
        logger.debug(f"Found whisper on PATH: {on_path}")
        return on_path

    for candidate in common_paths if common_paths is not None else get_common_paths():
        if candidate.exists():
            logger.debug(f"Found whisper at {candidate}")
            return str(candidate)

    logger.debug("Whisper binary not found")
    return None
