"""
Data models produced by change analysis.

A :class:`ChangeFactSheet` is created once per run from a unified diff and
handed to the suggestion step. It is immutable and carries no identity
beyond the diff it was derived from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class FileStat:
    """Insertion and deletion counts for a single file in a diff."""

    path: str
    insertions: int = 0
    deletions: int = 0

    @property
    def is_new(self) -> bool:
        return self.insertions > 0 and self.deletions == 0

    @property
    def is_deleted(self) -> bool:
        return self.deletions > 0 and self.insertions == 0

    @property
    def is_modified(self) -> bool:
        return self.insertions > 0 and self.deletions > 0


@dataclass(frozen=True)
class ChangeFactSheet:
    """Structured summary of a diff.

    Attributes
    ----------
    file_paths : Tuple[str, ...]
        Changed paths in the order they appear in the diff.
    file_types : Tuple[str, ...]
        Distinct lower-case file extensions without the leading dot.
    file_stats : Tuple[FileStat, ...]
        Per-file insertion/deletion counts, parallel to ``file_paths``.
    has_new_files, has_deleted_files, has_modified_files : bool
        Whether any file only gained lines, only lost lines, or both.
    is_feature, is_bugfix, is_refactor, is_breaking : bool
        Signals derived from keywords in the diff text.
    is_documentation, is_test, is_config : bool
        Signals derived from the changed paths.
    summary : str
        Sentence such as ``"Modified 2 files with 5 additions and 1 deletion"``.
    diff : str
        The diff text the sheet was built from.
    """

    file_paths: Tuple[str, ...]
    file_types: Tuple[str, ...]
    file_stats: Tuple[FileStat, ...]
    has_new_files: bool
    has_deleted_files: bool
    has_modified_files: bool
    is_feature: bool
    is_bugfix: bool
    is_refactor: bool
    is_documentation: bool
    is_test: bool
    is_config: bool
    is_breaking: bool
    summary: str
    diff: str = ""

    @property
    def insertions(self) -> int:
        return sum(stat.insertions for stat in self.file_stats)

    @property
    def deletions(self) -> int:
        return sum(stat.deletions for stat in self.file_stats)

    def change_kinds(self) -> Tuple[str, ...]:
        """Return the names of the classification flags that are set."""
        flags = (
            ("new files", self.has_new_files),
            ("deleted files", self.has_deleted_files),
            ("modified files", self.has_modified_files),
            ("feature", self.is_feature),
            ("bugfix", self.is_bugfix),
            ("refactor", self.is_refactor),
            ("documentation", self.is_documentation),
            ("tests", self.is_test),
            ("configuration", self.is_config),
            ("breaking change", self.is_breaking),
        )
        return tuple(name for name, value in flags if value)
