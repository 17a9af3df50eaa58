"""Change collection from a local git checkout.

The rest of the pipeline only talks to ``ChangeSource``. ``GitChangeSource``
shells out to the ``git`` executable; tests substitute an in-memory fake.
"""

from __future__ import annotations

import logging
import os
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)

CHANGED_FILES_PLACEHOLDER = "Error getting changed files"
_COMMIT_FORMAT = "%h - %s (%an, %ar)"
_ORIGIN_HEAD_PREFIX = "refs/remotes/origin/"


class CollectionError(RuntimeError):
    """A version-control query failed."""


@dataclass
class ChangeSet:
    """Everything the prompt builder needs from version control."""

    diff: str
    changed_files: str = ""
    commit_messages: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.diff.strip()


class ChangeSource(ABC):
    """Read-only view of the changes between two references."""

    @abstractmethod
    def diff(self, base: str, head: str) -> str:
        """Return the unified diff between the merge base of ``base`` and ``head``."""

    @abstractmethod
    def changed_files(self, base: str, head: str) -> str:
        """Return one ``STATUS\\tPATH`` line per changed file."""

    @abstractmethod
    def commit_log(self, base: str, head: str) -> str:
        """Return one line per commit reachable from ``head`` but not ``base``."""

    def current_branch(self) -> str:
        return "unknown"

    def default_branch(self) -> str:
        return "main"


class GitChangeSource(ChangeSource):
    def __init__(self, cwd: str | None = None):
        self.cwd = cwd

    def _git(self, *args: str) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                cwd=self.cwd,
            )
        except FileNotFoundError as e:
            if self.cwd and not os.path.isdir(self.cwd):
                raise CollectionError(f"Could not run git in {self.cwd}: {e}") from e
            raise CollectionError(f"git executable not found on PATH: {e}") from e
        except OSError as e:
            raise CollectionError(f"Could not run git: {e}") from e
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise CollectionError(f"git {args[0]} failed (exit {result.returncode}): {stderr}")
        return result.stdout

    def diff(self, base: str, head: str) -> str:
        return self._git("diff", f"{base}...{head}")

    def changed_files(self, base: str, head: str) -> str:
        return self._git("diff", "--name-status", f"{base}...{head}").strip()

    def commit_log(self, base: str, head: str) -> str:
        return self._git("log", f"{base}..{head}", f"--pretty=format:{_COMMIT_FORMAT}").strip()

    def current_branch(self) -> str:
        try:
            return self._git("branch", "--show-current").strip() or "unknown"
        except CollectionError:
            return "unknown"

    def default_branch(self) -> str:
        """Resolve the branch changes are reviewed against when none is given.

        Prefers the remote's HEAD, then a local ``main``, then ``master``.
        """
        try:
            ref = self._git("symbolic-ref", "refs/remotes/origin/HEAD").strip()
            branch = ref.removeprefix(_ORIGIN_HEAD_PREFIX)
            if branch:
                return branch
        except CollectionError:
            logger.debug("origin/HEAD is not set; falling back to local branch names.")

        try:
            self._git("rev-parse", "--verify", "main")
            return "main"
        except CollectionError:
            return "master"


def collect_changes(source: ChangeSource, base: str, head: str = "HEAD") -> ChangeSet:
    """Query ``source`` for the diff and its supporting context.

    A failing diff is fatal and propagates. The file summary and commit log
    are supplementary, so their failures are logged and replaced.
    """
    diff = source.diff(base, head)

    try:
        changed_files = source.changed_files(base, head)
    except CollectionError as e:
        logger.warning("Could not list changed files: %s", e)
        changed_files = CHANGED_FILES_PLACEHOLDER

    try:
        commit_messages = source.commit_log(base, head)
    except CollectionError as e:
        logger.warning("Could not read commit messages: %s", e)
        commit_messages = ""

    return ChangeSet(diff=diff, changed_files=changed_files, commit_messages=commit_messages)
