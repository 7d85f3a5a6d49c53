"""
Heuristics for turning a unified diff into a :class:`ChangeFactSheet`.

Every rule here is independent of the others and deterministic, so the
classification can be unit tested without a language model or a
repository. The only I/O is the optional fetch of the staged diff through
a :class:`~gitmoji_msg.vcs.git_client.GitClient`.
"""

from __future__ import annotations

import codecs
import logging
import re
from pathlib import PurePosixPath
from typing import Dict, List, Optional

from gitmoji_msg.analysis.fact_sheet import ChangeFactSheet, FileStat


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class NoChangesError(Exception):
    """Raised when there is nothing staged to analyse."""

    def __init__(self, message: str = "No staged changes found. Stage your changes first with `git add`.") -> None:
        super().__init__(message)


BREAKING_RE = re.compile(r"breaking change|breaking|remove.*api|delete.*function", re.IGNORECASE)
BUGFIX_RE = re.compile(r"fix|bug|error|issue|patch", re.IGNORECASE)
REFACTOR_RE = re.compile(r"refactor|restructure|reorganize|cleanup", re.IGNORECASE)
# An added line (not the "+++" header) declaring a function, class or export.
FEATURE_ADDITION_RE = re.compile(r"^\+(?!\+\+).*\b(?:function|class|export|def)\b", re.MULTILINE)

DOC_EXTENSIONS = frozenset({".md", ".mdx", ".rst", ".txt", ".adoc"})
DOC_KEYWORDS = ("readme", "changelog", "contributing", "license", "docs/", "doc/")

CONFIG_EXTENSIONS = frozenset(
    {".json", ".yaml", ".yml", ".toml", ".ini", ".cfg", ".conf", ".env", ".properties"}
)
CONFIG_KEYWORDS = ("config", "dockerfile", "makefile", ".env", ".gitignore", ".editorconfig", "requirements")

TEST_DIRECTORIES = frozenset({"test", "tests", "__tests__", "spec", "specs"})
TEST_NAME_MARKERS = (".test.", ".spec.", "_test.", "_spec.")

_GIT_HEADER_RE = re.compile(r'^diff --git "?a/(.+?)"? "?b/(.+?)"?$')


def is_test_path(path: str) -> bool:
    """Return True if ``path`` follows a test or spec naming convention."""
    pure = PurePosixPath(path.lower())
    name = pure.name
    if name.startswith("test_") or any(marker in name for marker in TEST_NAME_MARKERS):
        return True
    return any(part in TEST_DIRECTORIES for part in pure.parts[:-1])


def is_documentation_path(path: str) -> bool:
    lowered = path.lower()
    return PurePosixPath(lowered).suffix in DOC_EXTENSIONS or any(k in lowered for k in DOC_KEYWORDS)


def is_config_path(path: str) -> bool:
    lowered = path.lower()
    return PurePosixPath(lowered).suffix in CONFIG_EXTENSIONS or any(k in lowered for k in CONFIG_KEYWORDS)


def _unquote(value: str) -> str:
    # git C-quotes paths with special or non-ASCII characters: "caf\303\251.md".
    return codecs.escape_decode(value)[0].decode("utf-8", "replace")


def _clean_path(raw: str) -> Optional[str]:
    # "+++ b/path\t2024-01-01 ..." -> "path"; /dev/null means the side is absent.
    value = raw.split("\t", 1)[0].strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = _unquote(value[1:-1])
    if not value or value == "/dev/null":
        return None
    return re.sub(r"^[ab]/", "", value)


class _Section:
    __slots__ = ("header_path", "old_path", "new_path", "insertions", "deletions", "from_git_header")

    def __init__(self, header_path: Optional[str] = None, from_git_header: bool = False) -> None:
        self.header_path = header_path
        self.old_path: Optional[str] = None
        self.new_path: Optional[str] = None
        self.insertions = 0
        self.deletions = 0
        self.from_git_header = from_git_header

    @property
    def path(self) -> Optional[str]:
        return self.new_path or self.old_path or self.header_path


def parse_diff(diff: str) -> List[FileStat]:
    """Split a unified diff into per-file insertion/deletion counts.

    Both ``git diff`` output and plain ``---``/``+++`` unified diffs are
    understood. Files appearing more than once are merged, keeping the
    position of their first appearance.
    """
    sections: List[_Section] = []
    current: Optional[_Section] = None
    in_hunk = False
    lines = diff.splitlines()

    for index, line in enumerate(lines):
        if line.startswith("diff --git "):
            match = _GIT_HEADER_RE.match(line)
            header_path = match.group(2) if match else None
            if header_path and '"' in line:
                header_path = _unquote(header_path)
            current = _Section(header_path, from_git_header=True)
            sections.append(current)
            in_hunk = False
            continue
        starts_plain_section = (
            line.startswith("--- ")
            and index + 1 < len(lines)
            and lines[index + 1].startswith("+++ ")
            and (current is None or (in_hunk and not current.from_git_header))
        )
        if starts_plain_section:
            current = _Section()
            sections.append(current)
            in_hunk = False
        if current is None:
            continue
        if not in_hunk and line.startswith("--- "):
            current.old_path = _clean_path(line[4:])
        elif not in_hunk and line.startswith("+++ "):
            current.new_path = _clean_path(line[4:])
        elif line.startswith("@@"):
            in_hunk = True
        elif in_hunk and line.startswith("+"):
            current.insertions += 1
        elif in_hunk and line.startswith("-"):
            current.deletions += 1

    merged: Dict[str, List[int]] = {}
    for section in sections:
        path = section.path
        if path is None:
            continue
        counts = merged.setdefault(path, [0, 0])
        counts[0] += section.insertions
        counts[1] += section.deletions
    return [FileStat(path=path, insertions=ins, deletions=dels) for path, (ins, dels) in merged.items()]


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def summarize(file_count: int, insertions: int, deletions: int) -> str:
    """Describe aggregate counts, e.g. ``"Modified 1 file with 5 additions and 0 deletions"``."""
    return (
        f"Modified {_plural(file_count, 'file')} with "
        f"{_plural(insertions, 'addition')} and {_plural(deletions, 'deletion')}"
    )


def _file_types(paths: List[str]) -> List[str]:
    types: List[str] = []
    for path in paths:
        suffix = PurePosixPath(path).suffix.lower().lstrip(".")
        if suffix and suffix not in types:
            types.append(suffix)
    return types


def build_fact_sheet(diff: str) -> ChangeFactSheet:
    """Classify ``diff`` and return its fact sheet.

    Raises
    ------
    NoChangesError
        If the diff does not mention any file.
    """
    stats = parse_diff(diff)
    if not stats:
        raise NoChangesError()
    paths = [stat.path for stat in stats]
    insertions = sum(stat.insertions for stat in stats)
    deletions = sum(stat.deletions for stat in stats)

    sheet = ChangeFactSheet(
        file_paths=tuple(paths),
        file_types=tuple(_file_types(paths)),
        file_stats=tuple(stats),
        has_new_files=any(stat.is_new for stat in stats),
        has_deleted_files=any(stat.is_deleted for stat in stats),
        has_modified_files=any(stat.is_modified for stat in stats),
        is_feature=bool(FEATURE_ADDITION_RE.search(diff)) or any(not is_test_path(p) for p in paths),
        is_bugfix=bool(BUGFIX_RE.search(diff)),
        is_refactor=bool(REFACTOR_RE.search(diff)),
        is_documentation=any(is_documentation_path(p) for p in paths),
        is_test=any(is_test_path(p) for p in paths),
        is_config=any(is_config_path(p) for p in paths),
        is_breaking=bool(BREAKING_RE.search(diff)),
        summary=summarize(len(paths), insertions, deletions),
        diff=diff,
    )
    logger.debug("Fact sheet: %s; flags: %s", sheet.summary, ", ".join(sheet.change_kinds()))
    return sheet


class ChangeAnalyzer:
    """Produce a :class:`ChangeFactSheet` from a diff or from the staging area."""

    def __init__(self, git_client=None) -> None:
        self.git_client = git_client

    def _fetch_staged_diff(self) -> str:
        if self.git_client is None:
            raise NoChangesError("No diff given and no repository to read staged changes from.")
        if not self.git_client.get_staged_files():
            raise NoChangesError()
        diff = self.git_client.get_staged_diff()
        if not diff.strip():
            raise NoChangesError()
        return diff

    def analyze(self, diff: Optional[str] = None) -> ChangeFactSheet:
        """Analyse ``diff``, or the staged diff when ``diff`` is empty.

        Raises
        ------
        NoChangesError
            If nothing is staged or the diff names no files.
        GitError
            If reading the staged diff fails.
        """
        if not diff:
            diff = self._fetch_staged_diff()
        return build_fact_sheet(diff)
