"""Procrastinote: local task tracker with categories, progress summaries and calendar export."""

__version__ = "0.1.0"
