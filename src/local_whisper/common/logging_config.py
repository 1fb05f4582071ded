"""
Logging configuration for local-whisper.

Console output goes to stderr so stdout carries only the transcription
report; a debug-level log file is kept in the config directory.
"""

import logging
import sys
from pathlib import Path

from local_whisper.common.config import get_config_dir

LOG_FILENAME = "transcribe.log"


def get_log_file() -> Path:
    """Get platform-specific log file path."""
    return get_config_dir() / LOG_FILENAME


def setup_logging(
    verbose: bool = False,
    component: str = "transcribe",
    wipe_on_startup: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """
    Set up logging with console and file handlers.

    Args:
        verbose: Enable debug logging on the console
        component: Component name for log messages
        wipe_on_startup: Whether to delete the previous log file first
        log_file: Override the log file location

    Returns:
        Logger instance for the component
    """
    level = logging.DEBUG if verbose else logging.INFO

    verbose_formatter = logging.Formatter(
        f"%(asctime)s - [{component}] %(name)s - %(levelname)s - "
        f"[%(filename)s:%(lineno)d] - %(message)s"
    )
    console_formatter = logging.Formatter(
        f"%(asctime)s - [{component}] %(name)s - %(levelname)s - %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    has_file_handler = any(
        isinstance(h, logging.FileHandler) for h in root_logger.handlers
    )
    has_console_handler = any(
        type(h) is logging.StreamHandler and h.stream is sys.stderr
        for h in root_logger.handlers
    )

    if not has_console_handler:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    if not has_file_handler:
        try:
            log_file = log_file or get_log_file()
            log_file.parent.mkdir(parents=True, exist_ok=True)

            if wipe_on_startup and log_file.exists():
                log_file.unlink()

            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(verbose_formatter)
            root_logger.addHandler(file_handler)
        except Exception as e:
            print(f"Warning: Could not set up file logging: {e}", file=sys.stderr)

    if verbose:
        logging.getLogger(component).debug("Verbose logging enabled")

    return logging.getLogger(component)
