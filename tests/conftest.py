import logging
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolate_user_config(tmp_path, monkeypatch):
    """Point the config loader at a throwaway file and hide real API keys.

    Tests must never read or rewrite the developer's ``~/.gitmoji-msg.json``
    or pick up keys from the surrounding environment.
    """
    config_path = Path(tmp_path) / ".gitmoji-msg.json"
    monkeypatch.setattr(
        "gitmoji_msg.config.loader._get_config_path", lambda: config_path
    )
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    yield config_path


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo the ``logging.basicConfig`` call made by each CLI invocation."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
