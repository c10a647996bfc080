"""Kernel services: flush-only writers over the journal and chart of accounts."""
