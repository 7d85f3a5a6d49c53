"""
Configuration loader for gitmoji_msg.

Settings live in a JSON file named ``.gitmoji-msg.json`` in the user's
home directory. The file is merged over built-in defaults on load, so a
missing file simply yields the defaults. A file that cannot be parsed or
that holds values of the wrong type raises :class:`ConfigError`.

Everything here operates on an explicit :class:`ResolvedConfig` value;
nothing is cached at module level.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from gitmoji_msg.llm.providers import PROVIDERS


logger = logging.getLogger(__name__)
# Attach a null handler so importing the module never emits "No handler"
# warnings. The CLI configures real handlers on the root logger.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


CONFIG_FILENAME = ".gitmoji-msg.json"

DEFAULTS: Dict[str, Any] = {
    "provider": "openai",
    "model": "gpt-4o-mini",
    "interactive": True,
    "autoCommit": False,
}

# Keys accepted by ``gitmoji-msg config KEY VALUE``.
SETTABLE_KEYS = ("provider", "model", "interactive", "autoCommit", "scope", "apiKey")

_BOOL_KEYS = ("interactive", "autoCommit")
_STR_KEYS = ("provider", "model")
_OPTIONAL_STR_KEYS = ("scope", "apiKey")


class ConfigError(Exception):
    """Raised when the configuration file is unreadable or holds invalid values."""

    pass


@dataclass(frozen=True)
class ResolvedConfig:
    """Settings for a single invocation.

    Attributes
    ----------
    provider : str
        Name of the language model provider (``openai`` or ``anthropic``).
    model : str
        Model identifier passed to the provider.
    interactive : bool
        Offer a choice between suggestions when more than one is returned.
    auto_commit : bool
        Commit with the selected message instead of only printing it.
    scope : str, optional
        Default scope that overrides any scope suggested by the model.
    api_key : str, optional
        Explicit API key; takes precedence over environment variables.
    """

    provider: str = DEFAULTS["provider"]
    model: str = DEFAULTS["model"]
    interactive: bool = DEFAULTS["interactive"]
    auto_commit: bool = DEFAULTS["autoCommit"]
    scope: Optional[str] = None
    api_key: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResolvedConfig":
        """Build a config from the on-disk (camelCase) representation."""
        merged = {**DEFAULTS, **data}
        for key in _STR_KEYS:
            if not isinstance(merged[key], str):
                raise ConfigError(f"'{key}' must be a string")
        for key in _BOOL_KEYS:
            if not isinstance(merged[key], bool):
                raise ConfigError(f"'{key}' must be a boolean")
        for key in _OPTIONAL_STR_KEYS:
            value = merged.get(key)
            if value is not None and not isinstance(value, str):
                raise ConfigError(f"'{key}' must be a string")
        return cls(
            provider=merged["provider"],
            model=merged["model"],
            interactive=merged["interactive"],
            auto_commit=merged["autoCommit"],
            scope=merged.get("scope") or None,
            api_key=merged.get("apiKey") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the on-disk representation, omitting unset optional keys."""
        data: Dict[str, Any] = {
            "provider": self.provider,
            "model": self.model,
            "interactive": self.interactive,
            "autoCommit": self.auto_commit,
        }
        if self.scope:
            data["scope"] = self.scope
        if self.api_key:
            data["apiKey"] = self.api_key
        return data


def _get_config_path() -> Path:
    """Return the location of the per-user configuration file."""
    return Path.home() / CONFIG_FILENAME


def _read_raw() -> Dict[str, Any]:
    config_path = _get_config_path()
    if not config_path.exists():
        logger.debug("No configuration file at %s; using defaults", config_path)
        return {}
    try:
        text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Failed to read configuration file: %s", exc)
        raise ConfigError(f"Cannot read {config_path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a JSON object")
    return data


def load_config() -> ResolvedConfig:
    """Load the configuration, merging the file over the defaults.

    Raises
    ------
    ConfigError
        If the file exists but is malformed or holds wrongly typed values.
    """
    config = ResolvedConfig.from_dict(_read_raw())
    logger.debug(
        "Loaded configuration: provider=%s model=%s interactive=%s auto_commit=%s",
        config.provider,
        config.model,
        config.interactive,
        config.auto_commit,
    )
    return config


def _write(config: ResolvedConfig) -> None:
    config_path = _get_config_path()
    try:
        config_path.write_text(json.dumps(config.to_dict(), indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to write configuration file: %s", exc)
        raise ConfigError(f"Failed to save config: {exc}") from exc
    logger.debug("Saved configuration to %s", config_path)


def save_config(updates: Dict[str, Any]) -> ResolvedConfig:
    """Merge ``updates`` into the stored configuration and write it back.

    Keys use the on-disk (camelCase) names. A value of ``None`` removes the
    key, which is how ``scope`` and ``apiKey`` are cleared.
    """
    current = load_config().to_dict()
    for key, value in updates.items():
        if value is None:
            current.pop(key, None)
        else:
            current[key] = value
    config = ResolvedConfig.from_dict(current)
    _write(config)
    return config


def reset_config() -> ResolvedConfig:
    """Overwrite the stored configuration with the defaults."""
    config = ResolvedConfig()
    _write(config)
    return config


def parse_setting(key: str, value: str) -> Dict[str, Any]:
    """Convert a ``KEY VALUE`` pair from the command line into an update.

    Boolean settings treat ``"true"`` (any case) as true and everything else
    as false.
    """
    if key not in SETTABLE_KEYS:
        raise ConfigError(
            f"Unknown configuration key '{key}'. Must be one of: {', '.join(SETTABLE_KEYS)}"
        )
    if key in _BOOL_KEYS:
        return {key: value.lower() == "true"}
    if key == "provider" and value not in PROVIDERS:
        raise ConfigError(
            f"Invalid provider '{value}'. Must be: {', '.join(sorted(PROVIDERS))}"
        )
    if key in _OPTIONAL_STR_KEYS and not value:
        return {key: None}
    return {key: value}


def apply_overrides(
    config: ResolvedConfig,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    scope: Optional[str] = None,
    interactive: Optional[bool] = None,
    auto_commit: Optional[bool] = None,
) -> ResolvedConfig:
    """Return a copy of ``config`` with every non-``None`` override applied."""
    overrides = {
        "provider": provider,
        "model": model,
        "scope": scope,
        "interactive": interactive,
        "auto_commit": auto_commit,
    }
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def get_api_key(config: ResolvedConfig) -> Optional[str]:
    """Return the explicit key, or the provider's environment variable."""
    if config.api_key:
        return config.api_key
    provider = PROVIDERS.get(config.provider)
    if provider is None:
        return None
    return os.environ.get(provider.api_key_env) or None


def validate_config(config: ResolvedConfig) -> List[str]:
    """Return a list of problems that make the configuration unusable.

    An empty list means the configuration can be used for a request.
    """
    errors: List[str] = []
    provider = PROVIDERS.get(config.provider)
    if provider is None:
        errors.append(f"Unsupported AI provider: {config.provider}")
    elif not get_api_key(config):
        errors.append(
            f"No API key found for {config.provider}. Set the {provider.api_key_env} "
            "environment variable or configure it with 'gitmoji-msg config apiKey <key>'."
        )
    return errors
