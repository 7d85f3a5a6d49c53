"""
Commit message suggestions from a language model.

The :class:`SuggestionRequester` renders a :class:`ChangeFactSheet` and the
gitmoji reference table into a single prompt, makes exactly one structured
request through an :class:`~gitmoji_msg.llm.providers.LLMClient`, and
returns the validated candidates in the order the model ranked them.
There is no fallback message: any failure surfaces as :class:`LLMError`.
"""

from __future__ import annotations

import logging
from textwrap import dedent
from typing import List

from pydantic import ValidationError

from gitmoji_msg.analysis.fact_sheet import ChangeFactSheet
from gitmoji_msg.gitmojis import reference_table
from gitmoji_msg.llm.models import SUGGESTION_SCHEMA, Candidate, SuggestionSet
from gitmoji_msg.llm.providers import LLMClient, LLMError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


SCHEMA_NAME = "commit_suggestions"
# Diffs larger than this are cut to keep the prompt within model limits.
MAX_DIFF_CHARS = 12000


def _truncate_diff(diff: str, limit: int = MAX_DIFF_CHARS) -> str:
    if len(diff) <= limit:
        return diff
    omitted = len(diff) - limit
    return f"{diff[:limit]}\n... [diff truncated, {omitted} more characters]"


def build_prompt(fact_sheet: ChangeFactSheet) -> str:
    """Construct the prompt for ``fact_sheet``."""
    change_kinds = ", ".join(fact_sheet.change_kinds()) or "none detected"
    file_types = ", ".join(fact_sheet.file_types) or "none"
    # The reference table and diff are multi-line, so they are joined in
    # after dedent rather than interpolated into the template.
    header = dedent(
        f"""
        You are an expert at writing commit messages that use gitmojis.

        FILES CHANGED: {", ".join(fact_sheet.file_paths)}
        FILE TYPES: {file_types}
        SUMMARY: {fact_sheet.summary}
        DETECTED CHANGE KINDS: {change_kinds}
        """
    ).strip()
    instructions = dedent(
        """
        INSTRUCTIONS:
        1. Analyze the diff and pick the most appropriate gitmoji from the list above.
        2. Split each suggestion into components:
           - gitmoji: the emoji character
           - gitmoji_code: the :code: form
           - scope: short area such as api, ui, auth, db, config, cli or docs; null unless the
             change is clearly bounded to one area
           - message: brief lowercase explanation with no trailing period, starting with a verb
             (add, fix, update, remove, refactor); no emoji and no scope
        3. description: only for substantial changes; information-dense technical detail about
           what changed, why, and the impact; null for simple changes.
        4. Return 1 to 3 suggestions ranked best first, each with a confidence from 0 to 100
           reflecting how well the gitmoji fits.
        """
    ).strip()
    return "\n\n".join(
        [
            header,
            "AVAILABLE GITMOJIS:\n" + reference_table(),
            "GIT DIFF:\n" + _truncate_diff(fact_sheet.diff),
            instructions,
            "Generate commit message suggestions now:",
        ]
    )


class SuggestionRequester:
    """Request ranked commit message candidates for a fact sheet."""

    def __init__(self, client: LLMClient) -> None:
        self.client = client

    def request(self, fact_sheet: ChangeFactSheet) -> List[Candidate]:
        """Return 1-3 candidates, best first.

        Raises
        ------
        LLMError
            If the request fails or the response does not match the schema.
        """
        prompt = build_prompt(fact_sheet)
        try:
            data = self.client.generate_structured(prompt, SUGGESTION_SCHEMA, SCHEMA_NAME)
        except LLMError as exc:
            raise LLMError(f"AI generation failed: {exc}") from exc
        try:
            suggestions = SuggestionSet.model_validate(data)
        except ValidationError as exc:
            logger.error("Model response failed validation: %s", exc)
            raise LLMError(f"AI generation failed: malformed response: {exc}") from exc
        logger.debug("Received %d suggestion(s)", len(suggestions.suggestions))
        return list(suggestions.suggestions)
