"""Extra context files appended to the review prompt.

Context files are whatever the user points at with ``--context``: design
notes, a related module, an API contract. They are read from the local
filesystem as-is; nothing is truncated.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def render_context_file(path: str, content: str) -> str:
    """Render one file as a labelled block so the model can tell sources apart."""
    return f"\n\n--- Context from {path} ---\n{content}\n"


def load_context_files(paths: list[str]) -> str:
    """Read each path and concatenate the rendered blocks in the given order.

    An unreadable file is not fatal: it is skipped with a warning and the
    review proceeds with whatever context could be loaded.
    """
    blocks = []
    for raw_path in paths:
        path = raw_path.strip()
        if not path:
            continue
        try:
            content = Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Could not read context file %s: %s", path, e)
            continue
        blocks.append(render_context_file(path, content))
    return "".join(blocks)
