"""Errors for config modules."""

from ..core.error import BaseError


class ArgsParseError(BaseError):
    """Error raised when there is a problem parsing the command-line arguments."""


class LoggerAlreadyInitializedError(BaseError):
    """Error raised when a process-wide log sink is installed a second time."""
