"""
Choosing one candidate out of the ranked list.

Selection is automatic (the first, highest ranked candidate) unless
interactive mode is on and there is more than one candidate to choose
from. The interactive prompt is injected as a callable so the decision
logic can be tested without a terminal.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

import click

from gitmoji_msg.llm.models import Candidate
from gitmoji_msg.selection.formatter import format_choice_label


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


Chooser = Callable[[Sequence[Candidate]], int]


class SelectionCancelled(Exception):
    """Raised when the operator aborts the interactive choice."""

    pass


def prompt_for_candidate(candidates: Sequence[Candidate], scope: Optional[str] = None) -> int:
    """Show all candidates and return the zero-based index the operator picks.

    The first candidate is the default. Ctrl+C or end of input raises
    :class:`SelectionCancelled`.
    """
    click.echo("\n🎨 Choose your commit message:")
    for number, candidate in enumerate(candidates, start=1):
        click.echo(f"   {number}. {format_choice_label(candidate, scope)}")
        if candidate.description:
            click.echo(f"      📝 {candidate.description}")
    click.echo("")
    try:
        choice = click.prompt(
            "   Selection",
            type=click.IntRange(1, len(candidates)),
            default=1,
            show_default=True,
        )
    except click.Abort as exc:
        raise SelectionCancelled("Selection cancelled") from exc
    return choice - 1


def select_candidate(
    candidates: Sequence[Candidate],
    interactive: bool,
    chooser: Optional[Chooser] = None,
) -> Candidate:
    """Pick the candidate to commit with.

    Parameters
    ----------
    candidates : Sequence[Candidate]
        Ranked candidates, best first.
    interactive : bool
        Whether the operator may choose when several candidates exist.
    chooser : callable, optional
        Receives the candidates and returns the chosen index. Defaults to
        :func:`prompt_for_candidate`.

    Raises
    ------
    ValueError
        If ``candidates`` is empty.
    SelectionCancelled
        If the operator aborts the choice.
    """
    if not candidates:
        raise ValueError("No candidates to select from")
    if not interactive or len(candidates) == 1:
        return candidates[0]
    choose = chooser or prompt_for_candidate
    index = choose(candidates)
    logger.debug("Operator selected candidate %d of %d", index + 1, len(candidates))
    return candidates[index]
