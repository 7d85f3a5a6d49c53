"""
Candidate selection and commit message formatting.

See :mod:`gitmoji_msg.selection.selector` for choosing a candidate and
:mod:`gitmoji_msg.selection.formatter` for rendering it.
"""

from .formatter import (  # noqa: F401
    format_choice_label,
    format_commit_command,
    format_commit_message,
    format_title,
    resolve_scope,
)
from .selector import SelectionCancelled, prompt_for_candidate, select_candidate  # noqa: F401
