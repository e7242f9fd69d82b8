"""Parsers that turn a streamed message buffer into render segments."""
