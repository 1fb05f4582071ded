"""
Whisper CLI invocation.

Builds the whisper command line, runs it to completion, and reads back the
plain-text transcript it writes. Whisper also writes .srt, .vtt, .tsv and
.json variants next to it; those are left in place.
"""

import logging
import subprocess
from pathlib import Path

from local_whisper.common.binary_locator import find_whisper_binary
from local_whisper.common.config import TranscribeConfig
from local_whisper.common.errors import (
    ArtifactNotFoundError,
    BinaryNotFoundError,
    TranscriptionFailedError,
)
from local_whisper.common.models import AUTO, TranscriptionResult

logger = logging.getLogger(__name__)

TEXT_EXTENSION = ".txt"


def build_whisper_command(
    binary: str,
    input_path: Path,
    model: str,
    language: str | None,
    output_dir: Path,
) -> list[str]:
    """
    Build the whisper argument list.

    The --language flag is left out for "auto" so whisper runs its own
    language detection.
    """
    args = [binary, str(input_path), "--model", model]
    if language and language.lower() != AUTO:
        args += ["--language", language]
    args += ["--output_format", "all", "--output_dir", str(output_dir)]
    return args


def artifact_candidates(input_path: Path, output_dir: Path) -> list[Path]:
    """Where the transcript may land: output_dir first, then beside the input."""
    name = input_path.with_suffix(TEXT_EXTENSION).name
    candidates = [output_dir / name]
    fallback = input_path.parent / name
    if fallback != candidates[0]:
        candidates.append(fallback)
    return candidates


class WhisperRunner:
    """Runs the whisper CLI for one input file."""

    def __init__(self, config: TranscribeConfig):
        self.config = config

    def _run_command(self, args: list[str]) -> subprocess.CompletedProcess:
        """Run whisper and wait for it; timeout None means no limit."""
        return subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=self.config.transcription_timeout,
        )

    def invoke(
        self,
        input_path: Path,
        model: str,
        language: str | None,
        output_dir: Path | None = None,
    ) -> TranscriptionResult:
        """
        Transcribe a file with whisper.

        Args:
            input_path: Audio file to transcribe
            model: Resolved model name
            language: Language code or "auto"
            output_dir: Where whisper writes its files (defaults to the input's directory)

        Returns:
            TranscriptionResult with the transcript text and its location

        Raises:
            BinaryNotFoundError: If whisper cannot be located
            TranscriptionFailedError: If whisper fails to start, exits non-zero,
                or writes a transcript that cannot be read
            ArtifactNotFoundError: If whisper succeeded but wrote no .txt file
        """
        binary = find_whisper_binary(self.config)
        if not binary:
            raise BinaryNotFoundError()

        input_path = Path(input_path)
        output_dir = Path(output_dir) if output_dir else input_path.parent
        language = language or AUTO

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TranscriptionFailedError(
                f"cannot create output directory {output_dir}: {e}"
            ) from e

        args = build_whisper_command(binary, input_path, model, language, output_dir)
        logger.info(f"Transcribing with Whisper (model: {model}, language: {language})")
        logger.debug(f"Running: {args}")

        try:
            result = self._run_command(args)
        except subprocess.TimeoutExpired as e:
            raise TranscriptionFailedError(f"timed out after {e.timeout}s") from e
        except OSError as e:
            raise TranscriptionFailedError(str(e)) from e

        if result.returncode != 0:
            diagnostic = (result.stderr or result.stdout or "").strip()
            raise TranscriptionFailedError(
                diagnostic or f"whisper exited with status {result.returncode}",
                returncode=result.returncode,
            )

        candidates = artifact_candidates(input_path, output_dir)
        for candidate in candidates:
            if candidate.is_file():
                try:
                    text = candidate.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as e:
                    raise TranscriptionFailedError(
                        f"cannot read transcript {candidate}: {e}"
                    ) from e
                logger.info(f"Transcript written to {candidate}")
                return TranscriptionResult(
                    text=text,
                    artifact_path=candidate,
                    model=model,
                    language=language,
                )

        raise ArtifactNotFoundError(candidates)
