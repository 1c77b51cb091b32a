"""Ingestion layer.

This package contains the adapters that fetch data from the telemetry API,
the fixed-interval scheduler that drives them, and the glue that applies a
cycle's results to the state store.
"""

__all__: list[str] = []
