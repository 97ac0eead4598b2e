"""Spreadsheet decoding and record extraction."""
