"""
Shared data models for local-whisper.

Defines the option, status and result records passed between components.
"""

from dataclasses import dataclass, field
from pathlib import Path

# Whisper model sizes, fastest first
MODEL_SIZES: tuple[str, ...] = ("tiny", "base", "small", "medium", "large")

# Sentinel meaning "let whisper / the selector decide"
AUTO = "auto"

# Extensions the whisper CLI reads directly (no conversion is done here)
SUPPORTED_FORMATS: tuple[str, ...] = (".wav", ".mp3", ".m4a", ".flac", ".ogg")


@dataclass
class InvocationOptions:
    """Options for a single transcription run, as parsed from the command line."""

    audio_path: Path | None
    model: str | None = None
    language: str | None = None
    output_dir: Path | None = None
    smart_model: bool = True
    force: bool = False

    def __post_init__(self) -> None:
        # An explicit model always disables smart selection
        if self.model and self.model != AUTO:
            self.smart_model = False


@dataclass(frozen=True)
class BinaryStatus:
    """Presence of an external executable and where it was found."""

    present: bool
    path: str | None = None

    @classmethod
    def absent(cls) -> "BinaryStatus":
        return cls(present=False, path=None)

    @classmethod
    def found(cls, path: str) -> "BinaryStatus":
        return cls(present=True, path=path)


@dataclass(frozen=True)
class DependencyStatus:
    """Result of probing the external tools."""

    ffmpeg_present: bool
    whisper: BinaryStatus = field(default_factory=BinaryStatus.absent)
    python_present: bool = False

    @property
    def whisper_present(self) -> bool:
        return self.whisper.present

    def missing_required(self) -> list[str]:
        """Names of the tools a transcription cannot run without."""
        missing = []
        if not self.ffmpeg_present:
            missing.append("ffmpeg")
        if not self.whisper.present:
            missing.append("whisper")
        return missing

    @property
    def ready(self) -> bool:
        return not self.missing_required()


@dataclass(frozen=True)
class TranscriptionResult:
    """Result of a successful whisper run."""

    text: str
    artifact_path: Path
    model: str
    language: str
