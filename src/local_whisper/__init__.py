"""
local-whisper: transcribe local audio files with the OpenAI Whisper CLI.

Picks a model from the file size, keeps a single instance running per
machine, and reads back the transcript whisper writes.
"""

from local_whisper.common.version import get_version

__version__ = get_version()
