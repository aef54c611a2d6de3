# justify/fs.py
from __future__ import annotations

import logging
from pathlib import Path

from .errors import AlreadyExistsError

logger = logging.getLogger(__name__)


def write_file(path: Path, content: str, overwrite: bool = False) -> None:
    """
    Write content to path, creating parent directories.

    Raises AlreadyExistsError (without touching the file) when the path
    exists and overwrite is false. Existing content is truncated otherwise.
    """
    if path.exists() and not overwrite:
        raise AlreadyExistsError(f"{path} exists (use --force)")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8", newline="\n")
    logger.debug("wrote %s (%d bytes)", path, len(content))
