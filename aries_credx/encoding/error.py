"""Encoding-related exceptions."""

from ..core.error import BaseError


class EncodingError(BaseError):
    """General encoding error."""


class AttributeParseError(EncodingError):
    """Attribute value could not be parsed for the requested encoding."""


class BackendError(EncodingError):
    """Integer backend value could not be constructed."""
