"""
Smart model selection.

Picks a whisper model from the input's byte size alone: short recordings
(voice messages) get the most accurate model, longer ones a faster one.
"""

import logging
import os
from pathlib import Path

from local_whisper.common.models import AUTO

logger = logging.getLogger(__name__)

SIZE_THRESHOLD_KB = 100
SMALL_FILE_MODEL = "large"
LARGE_FILE_MODEL = "medium"


def select_model(
    file_path: Path | str,
    explicit_model: str | None = None,
    threshold_kb: float = SIZE_THRESHOLD_KB,
) -> str:
    """
    Choose a model for a file.

    Args:
        file_path: Audio file (must exist unless explicit_model is given)
        explicit_model: Caller's choice; anything but None/"auto" is returned as is
        threshold_kb: Size boundary in KB; files at or above it get the faster model

    Returns:
        Model name

    Raises:
        FileNotFoundError: If the file is missing and no explicit model was given
    """
    if explicit_model and explicit_model != AUTO:
        return explicit_model

    size_kb = os.stat(file_path).st_size / 1024
    model = SMALL_FILE_MODEL if size_kb < threshold_kb else LARGE_FILE_MODEL
    logger.info(f"File size: {size_kb:.1f}KB -> model: {model}")
    return model
