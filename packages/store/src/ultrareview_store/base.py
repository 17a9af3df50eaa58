"""Abstract store interface.

The CLI depends on BaseStore — not on a concrete backend — so the output
destination is swappable without touching CLI code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ultrareview_store.models import ReviewRecord


class OutputError(RuntimeError):
    """The review could not be persisted."""


class BaseStore(ABC):
    """Persistence layer for a finished review."""

    @abstractmethod
    def save(self, record: ReviewRecord) -> None:
        """Persist a completed review record.

        Raises OutputError on failure. A failed save must leave any previously
        persisted review intact.
        """

    def describe(self) -> str:
        """Human-readable location of the saved review, for terminal output."""
        return self.__class__.__name__
