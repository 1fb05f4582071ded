"""
Error types raised by local-whisper.

Every failure that should end a run with a message (and exit code 1) derives
from TranscribeError so the CLI can catch them in one place.
"""

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from local_whisper.common.models import DependencyStatus


class TranscribeError(Exception):
    """Base class for all local-whisper failures."""


class ConfigError(TranscribeError):
    """Raised when the configuration holds an invalid value."""


class AudioFileNotFoundError(TranscribeError, FileNotFoundError):
    """Raised when the input audio file does not exist."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Audio file not found: {path}")


class UnsupportedFormatError(TranscribeError):
    """Raised when the input extension is not one whisper reads directly."""

    def __init__(self, extension: str, supported: Iterable[str]):
        self.extension = extension or "unknown"
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported audio format: {self.extension}. "
            f"Supported formats: {', '.join(self.supported)}"
        )


class BinaryNotFoundError(TranscribeError):
    """Raised when no whisper executable can be located."""

    def __init__(
        self,
        message: str = "Whisper binary not found. Please install: pip install openai-whisper",
    ):
        super().__init__(message)


class MissingDependencyError(TranscribeError):
    """Raised when a required external tool is absent before transcription."""

    def __init__(self, status: "DependencyStatus"):
        self.status = status
        missing = ", ".join(status.missing_required()) or "unknown"
        super().__init__(f"Missing dependencies: {missing}")


class LockHeldError(TranscribeError):
    """Raised when another live instance holds the lock and force is off."""

    def __init__(self, pid: int):
        self.pid = pid
        super().__init__(
            f"Another whisper transcribe is already running (PID: {pid}). "
            "Use --force to override."
        )


class TranscriptionFailedError(TranscribeError):
    """Raised when the whisper process fails to spawn or exits non-zero."""

    def __init__(self, diagnostic: str, returncode: int | None = None):
        self.diagnostic = diagnostic
        self.returncode = returncode
        super().__init__(f"Whisper transcription failed: {diagnostic}")


class ArtifactNotFoundError(TranscribeError):
    """Raised when whisper exited cleanly but the .txt output is missing."""

    def __init__(self, candidates: Iterable[Path]):
        self.candidates = tuple(candidates)
        checked = ", ".join(str(p) for p in self.candidates)
        super().__init__(f"Transcription file not found (checked: {checked})")
