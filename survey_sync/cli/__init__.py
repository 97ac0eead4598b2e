"""Command line interface for survey-sync."""

from .__main__ import main

__all__ = ["main"]
