"""Incremental consumption of streamed message text."""
