"""Exception hierarchy shared by the pipeline, providers and CLI."""

from typing import Optional


class InkExprError(Exception):
    """Base class for all inkexpr errors."""


class ConfigError(InkExprError):
    """A configuration value is missing, unparseable or out of range.

    *field* names the offending config field when there is one.
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class RecognitionFailure(InkExprError):
    """The recognition engine errored, timed out or could not be reached."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message
