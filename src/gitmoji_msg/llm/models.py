"""
Response models for commit message suggestions.

:class:`Candidate` is one proposed commit message; :class:`SuggestionSet`
wraps the 1-3 ranked candidates returned by the model. Both are validated
with pydantic so that a malformed model response is rejected before it
reaches the selection step. :data:`SUGGESTION_SCHEMA` is the JSON schema
sent to the provider.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


MAX_SUGGESTIONS = 3


class Candidate(BaseModel):
    """A single commit message proposed by the model."""

    model_config = ConfigDict(frozen=True)

    gitmoji: str = Field(min_length=1)
    gitmoji_code: str = Field(min_length=1)
    message: str = Field(min_length=1)
    scope: Optional[str] = None
    description: Optional[str] = None
    confidence: int = Field(ge=0, le=100)

    @field_validator("gitmoji", "gitmoji_code", "message", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("scope", "description", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def _round_confidence(cls, value: Any) -> Any:
        if isinstance(value, float):
            return round(value)
        return value


class SuggestionSet(BaseModel):
    """Ranked candidates, best first."""

    model_config = ConfigDict(frozen=True)

    suggestions: List[Candidate] = Field(min_length=1, max_length=MAX_SUGGESTIONS)


_NULLABLE_STRING: Dict[str, Any] = {"type": ["string", "null"]}

SUGGESTION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "suggestions": {
            "type": "array",
            "description": f"1-{MAX_SUGGESTIONS} ranked commit message suggestions, best first",
            "minItems": 1,
            "maxItems": MAX_SUGGESTIONS,
            "items": {
                "type": "object",
                "properties": {
                    "gitmoji": {"type": "string", "description": 'The gitmoji emoji character (e.g. "🎨")'},
                    "gitmoji_code": {"type": "string", "description": 'The gitmoji code (e.g. ":art:")'},
                    "scope": {
                        **_NULLABLE_STRING,
                        "description": 'Optional scope such as "api", "ui" or "auth", without parentheses',
                    },
                    "message": {
                        "type": "string",
                        "description": "Brief explanation of the change, without emoji or scope",
                    },
                    "description": {
                        **_NULLABLE_STRING,
                        "description": "Concise technical description, only for substantial changes",
                    },
                    "confidence": {"type": "integer", "description": "Confidence score 0-100"},
                },
                "required": ["gitmoji", "gitmoji_code", "scope", "message", "description", "confidence"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["suggestions"],
    "additionalProperties": False,
}
