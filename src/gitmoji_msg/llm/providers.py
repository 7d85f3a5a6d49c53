"""
HTTP clients for the supported language model providers.

Each provider is one :class:`LLMClient` subclass that knows how to ask
its API for a JSON object conforming to a schema. The set of providers is
closed: :data:`PROVIDERS` maps the configuration name to the client class,
and adding a provider means adding one entry there.

All failures (connection errors, non-200 responses, payloads that do not
contain the expected structure) are raised as :class:`LLMError` with the
underlying error text. Requests are never retried.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Mapping, Optional, Type

import requests


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


DEFAULT_TEMPERATURE = 0.3


class LLMError(Exception):
    """Raised when communication with the language model fails."""

    pass


@dataclass
class LLMClient:
    """Base class for provider clients.

    Parameters
    ----------
    api_key : str
        Secret used to authenticate against the provider.
    model : str
        Model identifier, e.g. ``"gpt-4o-mini"``.
    request_timeout : float, optional
        Timeout in seconds for the HTTP request. Defaults to 60 seconds.
    temperature : float, optional
        Sampling temperature. Defaults to 0.3.
    """

    api_key: str
    model: str
    request_timeout: float = 60.0
    temperature: float = DEFAULT_TEMPERATURE

    name: ClassVar[str] = ""
    api_key_env: ClassVar[str] = ""
    endpoint: ClassVar[str] = ""

    def _headers(self) -> Dict[str, str]:
        raise NotImplementedError

    def _payload(self, prompt: str, schema: Dict[str, Any], schema_name: str) -> Dict[str, Any]:
        raise NotImplementedError

    def _extract(self, data: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        # Never log headers; they carry the API key.
        logger.debug("Sending request to %s (model=%s)", self.endpoint, self.model)
        try:
            response = requests.post(
                self.endpoint,
                headers=self._headers(),
                json=payload,
                timeout=self.request_timeout,
            )
        except requests.RequestException as exc:
            logger.error("Failed to connect to %s: %s", self.name, exc)
            raise LLMError(str(exc)) from exc
        if response.status_code != 200:
            logger.error(
                "%s returned non-200 status %s: %s", self.name, response.status_code, response.text
            )
            raise LLMError(f"{self.name} returned status {response.status_code}: {response.text}")
        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Failed to parse %s response: %s", self.name, exc)
            raise LLMError(f"Failed to parse {self.name} response: {exc}") from exc
        if not isinstance(data, dict):
            raise LLMError(f"Unexpected response structure from {self.name}")
        return data

    def generate_structured(
        self, prompt: str, schema: Dict[str, Any], schema_name: str = "response"
    ) -> Dict[str, Any]:
        """Ask the model for a JSON object matching ``schema``.

        Returns
        -------
        dict
            The decoded object. It is not validated against the schema here;
            callers are expected to do that.

        Raises
        ------
        LLMError
            If the request fails or the response lacks a JSON object.
        """
        data = self._post(self._payload(prompt, schema, schema_name))
        return self._extract(data)


@dataclass
class OpenAIClient(LLMClient):
    """Client for the OpenAI chat completions API using structured outputs."""

    name: ClassVar[str] = "openai"
    api_key_env: ClassVar[str] = "OPENAI_API_KEY"
    endpoint: ClassVar[str] = "https://api.openai.com/v1/chat/completions"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _payload(self, prompt: str, schema: Dict[str, Any], schema_name: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
            "response_format": {
                "type": "json_schema",
                "json_schema": {"name": schema_name, "strict": True, "schema": schema},
            },
        }

    def _extract(self, data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            message = data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMError("Unexpected response structure from openai") from exc
        if message.get("refusal"):
            raise LLMError(f"openai refused the request: {message['refusal']}")
        content = message.get("content")
        if not isinstance(content, str):
            raise LLMError("openai response did not contain any content")
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as exc:
            raise LLMError(f"openai returned invalid JSON: {exc}") from exc
        if not isinstance(parsed, dict):
            raise LLMError("openai returned JSON that is not an object")
        return parsed


@dataclass
class AnthropicClient(LLMClient):
    """Client for the Anthropic messages API.

    Structured output is obtained by forcing a single tool call whose input
    schema is the requested schema.
    """

    max_tokens: int = 1024

    name: ClassVar[str] = "anthropic"
    api_key_env: ClassVar[str] = "ANTHROPIC_API_KEY"
    endpoint: ClassVar[str] = "https://api.anthropic.com/v1/messages"
    api_version: ClassVar[str] = "2023-06-01"

    def _headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }

    def _payload(self, prompt: str, schema: Dict[str, Any], schema_name: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
            "tools": [
                {
                    "name": schema_name,
                    "description": "Record the structured answer.",
                    "input_schema": schema,
                }
            ],
            "tool_choice": {"type": "tool", "name": schema_name},
        }

    def _extract(self, data: Dict[str, Any]) -> Dict[str, Any]:
        for block in data.get("content") or []:
            if isinstance(block, dict) and block.get("type") == "tool_use":
                tool_input = block.get("input")
                if isinstance(tool_input, dict):
                    return tool_input
        raise LLMError("anthropic response did not contain a tool call")


PROVIDERS: Mapping[str, Type[LLMClient]] = MappingProxyType(
    {
        OpenAIClient.name: OpenAIClient,
        AnthropicClient.name: AnthropicClient,
    }
)


def get_client(
    provider: str, model: str, api_key: Optional[str], request_timeout: float = 60.0
) -> LLMClient:
    """Instantiate the client for ``provider``.

    Raises
    ------
    LLMError
        If the provider is not supported or no API key is available. No
        request is attempted in either case.
    """
    client_cls = PROVIDERS.get(provider)
    if client_cls is None:
        raise LLMError(f"Unsupported AI provider: {provider}")
    if not api_key:
        raise LLMError(f"No API key available for {provider}")
    return client_cls(api_key=api_key, model=model, request_timeout=request_timeout)
