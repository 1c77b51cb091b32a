"""State/store layer.

This package is the single source of truth for how fetched telemetry and
status results are merged into the dashboard snapshot, and for deciding
which of those merges are observable changes.
"""
