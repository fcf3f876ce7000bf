"""Command-line interface (`rochefort`)."""

from .main import app, main

__all__ = ["app", "main"]
