"""Upload services: lookup, reconciliation, progress, summary."""
