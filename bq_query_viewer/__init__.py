"""Rebuild runnable SQL from executed BigQuery query jobs."""

__version__ = "0.1.0"
