"""
Custom exceptions for the package.

Parsers never raise on string input; these cover configuration and the
command-line surface.
"""


class ChatStreamError(Exception):
    """Base class for errors raised by chatstream."""

    def __init__(self, message="chatstream failed"):
        self.message = message
        super().__init__(self.message)

    def __str__(self):
        return self.message


class ConfigurationError(ChatStreamError):
    """
    Exception raised when an environment variable or config value cannot be used.
    """
    def __init__(self, name, value, reason="invalid value"):
        self.name = name
        self.value = value
        super().__init__(f"{name}={value!r}: {reason}")
