"""
Change analysis for gitmoji_msg.

This package turns a unified diff into a :class:`ChangeFactSheet` using
simple path and keyword heuristics. See
:mod:`gitmoji_msg.analysis.change_analyzer` for the rules.
"""

from .change_analyzer import ChangeAnalyzer, NoChangesError, build_fact_sheet, parse_diff  # noqa: F401
from .fact_sheet import ChangeFactSheet, FileStat  # noqa: F401
