#!/usr/bin/env python3
"""
local-whisper entry point.

Usage:
    local-whisper <audio_file> [options]
    python -m local_whisper <audio_file> [options]

Exit status is 0 on success and 1 on any failure.
"""

import argparse
import logging
import sys
from pathlib import Path

from local_whisper import __version__
from local_whisper.common.config import TranscribeConfig, load_config
from local_whisper.common.dependency_checker import (
    INSTALL_INSTRUCTIONS,
    check_dependencies,
    format_dependency_report,
)
from local_whisper.common.errors import MissingDependencyError, TranscribeError
from local_whisper.common.logging_config import setup_logging
from local_whisper.common.models import MODEL_SIZES, InvocationOptions
from local_whisper.common.orchestrator import (
    ensure_dependencies,
    format_report,
    transcribe,
)
from local_whisper.common.single_instance import (
    InstanceLock,
    install_release_handlers,
)

logger = logging.getLogger(__name__)

EPILOG = """\
environment variables:
  WHISPER_MODEL=small     Default model when smart selection is off
  WHISPER_LANGUAGE=auto   Default language (auto, en, de, es, ...)
  WHISPER_CMD=<path>      Use this whisper executable

smart model selection:
  When enabled (default), the model is chosen from the file size:
  - Files < 100KB:  'large' model (max accuracy)
  - Files >= 100KB: 'medium' model (faster)

examples:
  local-whisper voice.ogg
  local-whisper voice.ogg --language de
  local-whisper voice.ogg --model large
  local-whisper voice.ogg --output-dir ~/transcriptions/
  local-whisper voice.ogg --no-smart-model
  local-whisper --check

model sizes:
  tiny   -   39 MB - fastest, lowest accuracy
  base   -   74 MB - fast, good accuracy
  small  -  244 MB - medium speed, better accuracy
  medium -  769 MB - slow, high accuracy
  large  - 1550 MB - slowest, best accuracy
"""


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="local-whisper",
        description="Transcribe audio files locally using OpenAI Whisper.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "audio_path",
        nargs="?",
        type=Path,
        help="Path to audio file (WAV, MP3, M4A, FLAC, OGG)",
    )
    parser.add_argument(
        "--model",
        choices=MODEL_SIZES,
        help="Model size (disables smart model selection)",
    )
    parser.add_argument(
        "--language",
        "--lang",
        "-l",
        help="Language code: auto (default), en, de, es, fr, ...",
    )
    parser.add_argument(
        "--output-dir",
        "--output",
        "-o",
        type=Path,
        help="Output directory for transcriptions (default: next to the input)",
    )
    smart = parser.add_mutually_exclusive_group()
    smart.add_argument(
        "--smart-model",
        dest="smart_model",
        action="store_true",
        help="Choose the model from the file size (default: on)",
    )
    smart.add_argument(
        "--no-smart-model",
        dest="smart_model",
        action="store_false",
        help="Use the default model instead of smart selection",
    )
    parser.set_defaults(smart_model=True)
    parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Terminate a running transcription and take over its lock",
    )
    parser.add_argument(
        "--check",
        "-c",
        action="store_true",
        help="Check dependencies and show status",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose debug logging",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def options_from_args(args: argparse.Namespace) -> InvocationOptions:
    """Convert parsed arguments into InvocationOptions."""
    return InvocationOptions(
        audio_path=args.audio_path,
        model=args.model,
        language=args.language,
        output_dir=args.output_dir,
        smart_model=args.smart_model,
        force=args.force,
    )


def show_dependencies(config: TranscribeConfig) -> None:
    """Print dependency status and installation instructions."""
    print(format_dependency_report(check_dependencies(config)))
    print()
    print(INSTALL_INSTRUCTIONS)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging(verbose=args.verbose)
    except Exception as e:
        print(f"WARNING: Failed to set up logging: {e}", file=sys.stderr)

    try:
        config = load_config(config_path=args.config)
    except TranscribeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.check:
        show_dependencies(config)
        return 0

    options = options_from_args(args)

    lock = InstanceLock(config.lock_path, takeover_wait=config.takeover_wait)
    try:
        lock.acquire(force=options.force)
    except TranscribeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    install_release_handlers(lock)

    try:
        if options.audio_path is None:
            parser.print_help()
            return 1

        try:
            ensure_dependencies(config)
            result = transcribe(options, config)
        except MissingDependencyError as e:
            print(f"Error: {e}", file=sys.stderr)
            print(format_dependency_report(e.status))
            print()
            print(INSTALL_INSTRUCTIONS)
            return 1
        except TranscribeError as e:
            logger.debug("Transcription failed", exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1

        print(format_report(result))
        return 0
    finally:
        lock.release()


if __name__ == "__main__":
    sys.exit(main())
