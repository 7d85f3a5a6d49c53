"""
Top-level package for gitmoji_msg.

This package exposes the main CLI entry point via the
``gitmoji_msg.cli`` module.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
