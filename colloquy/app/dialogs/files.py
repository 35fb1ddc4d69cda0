from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

LOGGER = logging.getLogger(__name__)

LoadFile = Callable[[str], Optional[bytes]]


def read_dialog_file(path: str) -> bytes | None:
    """Read a local dialog file, or ``None`` when it cannot be read.

    The caller reports the failure; only the OS error is kept at debug level.
    """
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        LOGGER.debug("Could not read dialog file %s: %s", path, exc)
        return None


def dialog_file_name(path: str) -> str:
    return Path(path).name
