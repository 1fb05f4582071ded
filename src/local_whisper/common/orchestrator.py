"""
Transcription orchestration.

Validates the input, resolves the model and language from the options and
configuration, and hands the work to WhisperRunner.
"""

import logging
from pathlib import Path

from local_whisper.common.config import TranscribeConfig
from local_whisper.common.dependency_checker import check_dependencies
from local_whisper.common.errors import (
    AudioFileNotFoundError,
    MissingDependencyError,
    UnsupportedFormatError,
)
from local_whisper.common.model_selector import select_model
from local_whisper.common.models import (
    AUTO,
    SUPPORTED_FORMATS,
    DependencyStatus,
    InvocationOptions,
    TranscriptionResult,
)
from local_whisper.common.whisper_runner import WhisperRunner

logger = logging.getLogger(__name__)

RULER_WIDTH = 50


def is_supported_format(audio_path: Path | str) -> bool:
    """True if whisper reads the file's extension directly (case-insensitive)."""
    return Path(audio_path).suffix.lower() in SUPPORTED_FORMATS


def validate_audio_file(audio_path: Path) -> None:
    """
    Check that the input exists and has a supported extension.

    Raises:
        AudioFileNotFoundError: If the file does not exist
        UnsupportedFormatError: If the extension is not supported
    """
    if not audio_path.exists():
        raise AudioFileNotFoundError(audio_path)

    if not is_supported_format(audio_path):
        raise UnsupportedFormatError(audio_path.suffix.lower(), SUPPORTED_FORMATS)


def resolve_model(
    audio_path: Path, options: InvocationOptions, config: TranscribeConfig
) -> str:
    """Pick the model: explicit flag, else smart selection, else the configured default."""
    if options.model and options.model != AUTO:
        logger.info(f"Using model: {options.model}")
        return options.model

    if options.smart_model:
        return select_model(audio_path, AUTO, threshold_kb=config.size_threshold_kb)

    logger.info(f"Using model: {config.default_model}")
    return config.default_model


def ensure_dependencies(config: TranscribeConfig) -> DependencyStatus:
    """
    Probe dependencies and fail if a required one is missing.

    Raises:
        MissingDependencyError: If ffmpeg or whisper is absent
    """
    status = check_dependencies(config)
    if not status.ready:
        raise MissingDependencyError(status)
    return status


def transcribe(
    options: InvocationOptions,
    config: TranscribeConfig,
    runner: WhisperRunner | None = None,
) -> TranscriptionResult:
    """
    Transcribe the file named in options.

    Args:
        options: Parsed invocation options (audio_path is required)
        config: Run configuration
        runner: WhisperRunner to use (one is built from config if omitted)

    Returns:
        TranscriptionResult

    Raises:
        AudioFileNotFoundError, UnsupportedFormatError, BinaryNotFoundError,
        TranscriptionFailedError, ArtifactNotFoundError
    """
    if options.audio_path is None:
        raise AudioFileNotFoundError("")

    audio_path = Path(options.audio_path).expanduser()
    language = options.language or config.default_language

    logger.info(f"Input: {audio_path}")
    logger.info(f"Language: {language}")
    logger.info(f"Output: {options.output_dir or 'same as input'}")

    validate_audio_file(audio_path)
    model = resolve_model(audio_path, options, config)

    output_dir = Path(options.output_dir).expanduser() if options.output_dir else None
    runner = runner or WhisperRunner(config)
    return runner.invoke(audio_path, model, language, output_dir)


def format_report(result: TranscriptionResult) -> str:
    """Render a result the way the CLI prints it."""
    lines = [
        "=" * RULER_WIDTH,
        "Transcription:",
        "-" * RULER_WIDTH,
        result.text.rstrip("\n"),
        "-" * RULER_WIDTH,
        "",
        f"Saved to: {result.artifact_path}",
        f"Model used: {result.model}",
        "Transcription complete!",
    ]
    return "\n".join(lines)
