"""FileStore — writes the review to a Markdown file with numbered backups.

Each save supersedes the previous review at the same path. The old file is
rotated into ``PATH.~1~`` (older backups shift up a slot) before the new
content is written, so running the tool repeatedly keeps the full history
next to the live file until someone deletes it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ultrareview_store.backup import rotate_backups
from ultrareview_store.base import BaseStore, OutputError

if TYPE_CHECKING:
    from ultrareview_store.models import ReviewRecord

logger = logging.getLogger(__name__)


class FileStore(BaseStore):
    """Stores the latest review at a fixed path, default ``REQUESTED_CHANGES.md``."""

    def __init__(self, path: str = "REQUESTED_CHANGES.md"):
        self.path = Path(path)

    def save(self, record: ReviewRecord) -> None:
        self.write(record.content)
        logger.info(
            "Saved review of %s (%s...%s) by %s at %s to %s [%d in / %d out tokens]",
            record.branch,
            record.base_ref,
            record.head_ref,
            record.reviewer_model,
            record.reviewed_at,
            self.path,
            record.input_tokens,
            record.output_tokens,
        )

    def write(self, content: str) -> None:
        """Rotate any existing file into the backup chain, then write ``content`` verbatim."""
        rotated = rotate_backups(self.path)
        if rotated is not None:
            logger.info("Previous review moved to %s", rotated)

        try:
            # newline="" keeps the content byte-for-byte; no platform newline translation.
            with open(self.path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            raise OutputError(f"Could not write review to {self.path}: {e}") from e

    def describe(self) -> str:
        return str(self.path)
