"""
Dependency checking for local-whisper.

Runs a short probe command for each external tool and reports presence.
Probe failures are captured as "absent"; nothing here raises.
"""

import logging
import subprocess

from local_whisper.common.binary_locator import find_whisper_binary
from local_whisper.common.config import TranscribeConfig
from local_whisper.common.models import BinaryStatus, DependencyStatus

logger = logging.getLogger(__name__)

FFMPEG_PROBE = ["ffmpeg", "-version"]
PYTHON_PROBE = ["python3", "--version"]

INSTALL_INSTRUCTIONS = """\
Installation instructions:

1. FFmpeg:
   # NixOS: Add to /etc/nixos/configuration.nix
   environment.systemPackages = with pkgs; [ ffmpeg ];

   # Debian/Ubuntu:
   sudo apt install ffmpeg

   # Or try:
   nix-env -iA nixpkgs.ffmpeg

2. OpenAI Whisper:
   pip install openai-whisper

   # Or with GPU support:
   pip install openai-whisper[torch]

3. Non-standard whisper location:
   export WHISPER_CMD=/path/to/whisper
"""


def _run_probe(args: list[str], timeout: float | None) -> bool:
    """Run a probe command; True only if it starts and exits 0."""
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.debug(f"Probe timed out: {args[0]}")
        return False
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Probe failed to start: {args[0]}: {e}")
        return False

    if result.returncode != 0:
        logger.debug(f"Probe exited {result.returncode}: {args[0]}")
        return False
    return True


def check_dependencies(config: TranscribeConfig) -> DependencyStatus:
    """
    Probe ffmpeg, whisper and python3.

    Args:
        config: Run configuration (binary override and probe timeout)

    Returns:
        Fresh DependencyStatus
    """
    ffmpeg_present = _run_probe(FFMPEG_PROBE, config.probe_timeout)

    whisper = BinaryStatus.absent()
    whisper_path = find_whisper_binary(config)
    if whisper_path and _run_probe([whisper_path, "--help"], config.probe_timeout):
        whisper = BinaryStatus.found(whisper_path)

    python_present = _run_probe(PYTHON_PROBE, config.probe_timeout)

    status = DependencyStatus(
        ffmpeg_present=ffmpeg_present,
        whisper=whisper,
        python_present=python_present,
    )
    logger.info(
        f"Dependencies: ffmpeg={status.ffmpeg_present}, "
        f"whisper={status.whisper.path or False}, python3={status.python_present}"
    )
    return status


def format_dependency_report(status: DependencyStatus) -> str:
    """Render a DependencyStatus as the table printed by --check."""

    def mark(present: bool) -> str:
        return "OK" if present else "MISSING"

    whisper_location = status.whisper.path if status.whisper.present else "not found"
    lines = [
        "Checking dependencies...",
        "",
        f"  ffmpeg:   {mark(status.ffmpeg_present)}",
        f"  whisper:  {mark(status.whisper.present)} ({whisper_location})",
        f"  python3:  {mark(status.python_present)}",
    ]
    return "\n".join(lines)
