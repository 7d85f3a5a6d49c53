"""
Rendering of a selected candidate into a commit message.

All functions here are pure: the same candidate and scope always produce
the same strings. The scope given by the operator (command line or
configuration) wins over the scope suggested by the model.
"""

from __future__ import annotations

import shlex
from typing import Optional

from gitmoji_msg.llm.models import Candidate


def resolve_scope(candidate: Candidate, scope: Optional[str] = None) -> Optional[str]:
    """Return the explicit scope, else the candidate's scope, else ``None``."""
    return scope or candidate.scope or None


def format_subject(candidate: Candidate, scope: Optional[str] = None) -> str:
    """Return ``"(scope): message"`` or just ``"message"`` when there is no scope."""
    effective = resolve_scope(candidate, scope)
    if effective:
        return f"({effective}): {candidate.message}"
    return candidate.message


def format_title(candidate: Candidate, scope: Optional[str] = None) -> str:
    """Return the first line of the commit message, gitmoji included."""
    return f"{candidate.gitmoji} {format_subject(candidate, scope)}"


def format_commit_message(candidate: Candidate, scope: Optional[str] = None) -> str:
    """Return the full commit message: title plus an optional description paragraph."""
    title = format_title(candidate, scope)
    if candidate.description:
        return f"{title}\n\n{candidate.description}"
    return title


def format_choice_label(candidate: Candidate, scope: Optional[str] = None) -> str:
    """Return a one-line label for the interactive selection list."""
    return f"{format_title(candidate, scope)} ({candidate.confidence}% confidence)"


def format_commit_command(candidate: Candidate, scope: Optional[str] = None) -> str:
    """Return the ``git commit`` command line equivalent to committing the candidate."""
    parts = ["git", "commit", "-m", format_title(candidate, scope)]
    if candidate.description:
        parts += ["-m", candidate.description]
    return " ".join(shlex.quote(part) for part in parts)
