"""Command-line interface for simchat."""

from .app import main

__all__ = ["main"]
