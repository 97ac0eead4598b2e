"""Labeled logging and failure log buffering."""
