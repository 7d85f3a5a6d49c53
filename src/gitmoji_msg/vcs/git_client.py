"""
Git client implementation for gitmoji_msg.

This module wraps the handful of Git operations the tool needs: reading
the working tree status, reading staged and unstaged diffs, staging
everything, and committing. Every command goes through :meth:`GitClient._run`
so that unit tests can mock a single method.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Records propagate to the handlers the CLI installs on the root.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class FileChange:
    """One entry of ``git status --porcelain``.

    ``index`` and ``worktree`` are the two status columns, e.g. ``"M"``,
    ``"A"``, ``"D"``, ``"R"``, ``"?"`` or ``" "``.
    """

    path: str
    index: str
    worktree: str

    @property
    def is_untracked(self) -> bool:
        return self.index == "?" and self.worktree == "?"

    @property
    def is_staged(self) -> bool:
        return self.index not in (" ", "?")

    @property
    def indicator(self) -> str:
        """Return an emoji describing the change, for status listings."""
        if self.is_untracked:
            return "❓"
        if self.index == "A":
            return "➕"
        if "M" in (self.index, self.worktree):
            return "📝"
        if "D" in (self.index, self.worktree):
            return "🗑️"
        if self.index == "R":
            return "🚚"
        if self.index == "C":
            return "📋"
        return "📄"


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class GitClient:
    """Client for interacting with a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached. ``.git`` may be a file for worktrees and submodules.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If git cannot be started, or the command exits with a non-zero
            status when ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd[:3]))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            logger.error("Failed to run git: %s", exc)
            raise GitError(f"Failed to run git: {exc}") from exc

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd[:3]),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # Status and diffs
    # ------------------------------------------------------------------
    def get_changes(self) -> List[FileChange]:
        """Return every entry of ``git status --porcelain``, untracked files included.

        Renamed files keep the ``"old -> new"`` form in ``path``.
        """
        result = self._run(["status", "--porcelain"])
        changes: List[FileChange] = []
        for line in result.stdout.splitlines():
            # Porcelain format: XY<space>path
            if len(line) < 4 or not line.strip():
                continue
            changes.append(FileChange(path=line[3:], index=line[0], worktree=line[1]))
        return changes

    def get_staged_files(self) -> List[str]:
        """Return the paths currently staged for commit."""
        result = self._run(["diff", "--cached", "--name-only"])
        return [line for line in result.stdout.splitlines() if line.strip()]

    def get_staged_diff(self) -> str:
        """Return the unified diff of the staging area against HEAD."""
        return self._run(["diff", "--cached"]).stdout

    def get_working_diff(self) -> str:
        """Return the unified diff of unstaged changes in the working tree."""
        return self._run(["diff"]).stdout

    # ------------------------------------------------------------------
    # Staging and committing
    # ------------------------------------------------------------------
    def add_all(self) -> None:
        """Stage every change in the working tree, like ``git add .``."""
        self._run(["add", "."])

    def commit(self, message: str) -> None:
        """Create a commit with the given (possibly multi-line) message."""
        self._run(["commit", "-m", message])

    def get_last_commit(self) -> Tuple[str, str]:
        """Return the short hash and subject of ``HEAD``."""
        result = self._run(["log", "-1", "--format=%h%x00%s"])
        short_hash, _, subject = result.stdout.strip().partition("\x00")
        return short_hash, subject
