"""
Configuration handling for gitmoji_msg.

Provides loading, saving and validation of the per-user JSON settings
file. See :mod:`gitmoji_msg.config.loader` for implementation details.
"""

from .loader import (  # noqa: F401
    ConfigError,
    ResolvedConfig,
    apply_overrides,
    get_api_key,
    load_config,
    reset_config,
    save_config,
    validate_config,
)
