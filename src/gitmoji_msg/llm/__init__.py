"""
Language model integration for gitmoji_msg.

This package contains the provider clients (:mod:`providers`), the
pydantic response models (:mod:`models`) and the
:class:`SuggestionRequester` which turns a change fact sheet into ranked
commit message candidates.
"""

from .models import Candidate, SuggestionSet  # noqa: F401
from .providers import PROVIDERS, LLMClient, LLMError, get_client  # noqa: F401
from .suggestion_requester import SuggestionRequester  # noqa: F401
