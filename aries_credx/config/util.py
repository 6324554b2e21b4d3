"""Configuration helpers."""

import os

from configargparse import ArgumentTypeError

from ..encoding.attributes import get_backend
from ..encoding.base import AttributeEncoder
from .base import BaseSettings
from .logging import LoggingConfigurator


def common_config(settings: BaseSettings):
    """Perform common app configuration."""
    # Set up logging
    log_config = settings.get_str("log.config")
    log_level = settings.get_str("log.level") or os.getenv("LOG_LEVEL")
    log_file = settings.get_str("log.file")
    LoggingConfigurator.configure(log_config, log_level, log_file)


def build_encoder(settings: BaseSettings) -> AttributeEncoder:
    """
    Create the attribute encoder selected by the settings.

    Raises:
        SettingsError: If the integer width is not a number
        EncodingError: If the backend or width is not supported

    """
    return AttributeEncoder(
        get_backend(settings.get_str("encoding.backend", default="field_element")),
        int_bits=settings.get_int("encoding.int_bits", default=64),
    )


class BoundedInt:
    """Argument value parser for a bounded integer."""

    def __init__(self, min: int = None, max: int = None, step: int = None):
        """Initialize the BoundedInt parser."""
        self.min_val = min
        self.max_val = max
        self.step = step

    def __call__(self, arg: str) -> int:
        """Interpret the argument value."""
        if not arg:
            raise ArgumentTypeError("Expected integer value")
        try:
            val = int(arg)
        except ValueError:
            raise ArgumentTypeError(f"Invalid integer value: '{arg}'")
        if self.min_val is not None and val < self.min_val:
            raise ArgumentTypeError(
                f"Value must be greater than or equal to {self.min_val}"
            )
        if self.max_val is not None and val > self.max_val:
            raise ArgumentTypeError(
                f"Value must be less than or equal to {self.max_val}"
            )
        if self.step and val % self.step:
            raise ArgumentTypeError(f"Value must be a multiple of {self.step}")
        return val

    def __repr__(self):
        """Format for in error reporting."""
        return "integer"
