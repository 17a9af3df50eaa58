"""GNU-style numbered backups (``FILE.~1~``, ``FILE.~2~``, ...).

Slot 1 always holds the most recently superseded content; higher slots are
older. Rotation never overwrites or renumbers a backup downward, so content
is never lost, only pushed one slot further back.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ultrareview_store.base import OutputError

logger = logging.getLogger(__name__)


def backup_path(path: str | os.PathLike, n: int) -> Path:
    """Return the path of backup slot ``n`` for ``path``."""
    if n < 1:
        raise ValueError(f"Backup slots start at 1, got {n}")
    path = Path(path)
    return path.with_name(f"{path.name}.~{n}~")


def _first_free_slot(path: Path) -> int:
    n = 1
    while backup_path(path, n).exists():
        n += 1
    return n


def list_backups(path: str | os.PathLike) -> list[Path]:
    """Return the existing backups of ``path``, newest first."""
    path = Path(path)
    return [backup_path(path, n) for n in range(1, _first_free_slot(path))]


def rotate_backups(path: str | os.PathLike) -> Path | None:
    """Move the live file at ``path`` into backup slot 1.

    Every existing backup is shifted up one slot first, working from the
    highest slot down so no rename ever lands on an occupied name. Returns
    the new slot-1 path, or None when there was no live file to rotate.

    Raises OutputError if any rename fails. The live file is moved last, so
    a failure part-way leaves it untouched.
    """
    path = Path(path)
    if not path.exists():
        return None

    free = _first_free_slot(path)
    for n in range(free - 1, 0, -1):
        src, dst = backup_path(path, n), backup_path(path, n + 1)
        try:
            src.rename(dst)
        except OSError as e:
            raise OutputError(f"Could not rotate backup {src} to {dst}: {e}") from e

    first = backup_path(path, 1)
    try:
        path.rename(first)
    except OSError as e:
        raise OutputError(f"Could not back up {path} to {first}: {e}") from e

    logger.debug("Rotated %s into %s (%d older backup(s) shifted)", path, first, free - 1)
    return first
