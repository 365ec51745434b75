"""Observability helpers (tracing, courtesy counters)."""
