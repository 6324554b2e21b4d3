"""Attribute encoder and integer backend interface."""

import logging
import math
import sys

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Type, Union

from .error import EncodingError
from .util import (
    DigestFactory,
    as_u64,
    epoch_seconds,
    hash_digest,
    int_to_bytes,
    integral,
    parse_rfc3339,
    whole_days_between,
)

LOGGER = logging.getLogger(__name__)

# 2^BITS_IN_ZERO is the origin of all signed and temporal encodings
BITS_IN_ZERO = 254

# decimal digits kept after the point when scaling floats
F64_DIGITS = 15
F64_FORMAT = "{:.%de}" % F64_DIGITS

DAYS_SINCE_REFERENCE = parse_rfc3339("1900-01-01T00:00:00.000+00:00")

NULL_BYTES = bytes(31) + b"\x07"


class BaseIntegerBackend(ABC):
    """
    Abstract cryptographic integer.

    Implementations are immutable values supporting addition, subtraction
    and negation within their domain.
    """

    __slots__ = ()

    @classmethod
    @abstractmethod
    def max(cls) -> "BaseIntegerBackend":
        """Return the highest value of the domain."""

    @classmethod
    @abstractmethod
    def zero_center(cls) -> "BaseIntegerBackend":
        """Return the value representing zero, 2^254 in the domain."""

    @classmethod
    @abstractmethod
    def from_bytes(cls, data: bytes) -> "BaseIntegerBackend":
        """
        Canonicalize a big-endian byte sequence into the domain.

        Args:
            data: The big-endian bytes

        Returns:
            The backend value

        """

    @classmethod
    @abstractmethod
    def from_u64(cls, value: int) -> "BaseIntegerBackend":
        """Construct a value from an unsigned 64-bit integer."""

    @abstractmethod
    def __add__(self, other: "BaseIntegerBackend") -> "BaseIntegerBackend":
        """Add two values."""

    @abstractmethod
    def __sub__(self, other: "BaseIntegerBackend") -> "BaseIntegerBackend":
        """Subtract a value."""

    @abstractmethod
    def __neg__(self) -> "BaseIntegerBackend":
        """Negate the value."""


class AttributeEncoder:
    """Convert attribute values to cryptographic integers of a given backend."""

    def __init__(self, backend: Type[BaseIntegerBackend], int_bits: int = 64):
        """
        Initialize the encoder.

        Args:
            backend: The integer backend class producing encoded values
            int_bits: Width in bits of the machine integers accepted by
                `encode_from_isize` and `encode_from_usize`

        """
        if not 8 <= int_bits <= 64 or int_bits % 8:
            raise EncodingError("Integer width must be a multiple of 8 up to 64")
        self.backend = backend
        self.int_bits = int_bits

    def __repr__(self) -> str:
        """Return a human readable representation."""
        return (
            f"<{self.__class__.__name__}"
            f" backend={self.backend.__name__} int_bits={self.int_bits}>"
        )

    @property
    def isize_min(self) -> int:
        """Lowest signed integer accepted."""
        return -(1 << (self.int_bits - 1))

    @property
    def isize_max(self) -> int:
        """Highest signed integer accepted."""
        return (1 << (self.int_bits - 1)) - 1

    @property
    def usize_max(self) -> int:
        """Highest unsigned integer accepted."""
        return (1 << self.int_bits) - 1

    def encoded_null(self) -> BaseIntegerBackend:
        """Encoded value indicating an attribute value was not available."""
        return self.backend.from_bytes(NULL_BYTES)

    def encode_from_rfc3339_as_unixtimestamp(self, value: str) -> BaseIntegerBackend:
        """
        Encode an RFC3339 date-time string as seconds since the unix epoch.

        Dates before 1970 wrap around as unsigned 64-bit values.

        Args:
            value: The date-time string

        Raises:
            AttributeParseError: If the value cannot be parsed

        """
        timestamp = epoch_seconds(parse_rfc3339(value))
        return self.backend.zero_center() + self.backend.from_u64(as_u64(timestamp))

    def encode_from_rfc3339_as_dayssince1900(self, value: str) -> BaseIntegerBackend:
        """
        Encode an RFC3339 date-time string as whole days since 1900-01-01 UTC.

        Args:
            value: The date-time string

        Raises:
            AttributeParseError: If the value cannot be parsed

        """
        days = whole_days_between(DAYS_SINCE_REFERENCE, parse_rfc3339(value))
        return self.backend.zero_center() + self.backend.from_u64(as_u64(days))

    def encode_from_utf8_as_hash(
        self, value: str, digest: Union[str, DigestFactory] = "sha256"
    ) -> BaseIntegerBackend:
        """
        Encode a string as the digest of its UTF-8 bytes.

        The result is not zero-centered.

        Args:
            value: The string to hash
            digest: A registered digest name or a hashlib-style constructor
                producing a 32 byte digest

        """
        return self.backend.from_bytes(hash_digest(value.encode("utf-8"), digest))

    def encode_from_f64(self, value: float) -> BaseIntegerBackend:
        """
        Encode a floating point number.

        NaN, subnormal and infinite values map to reserved sentinels. Normal
        values are scaled by 2^254 as a fixed point decimal; positive values
        are not offset while negative ones are subtracted from the zero center,
        so that `encode(v) + encode(-v)` is the zero center.

        Args:
            value: The number to encode

        """
        value = float(value)
        backend = self.backend
        if math.isnan(value) or 0 < abs(value) < sys.float_info.min:
            LOGGER.debug("Encoding %r as the NaN sentinel", value)
            return backend.max() - backend.from_u64(8)
        if value == 0:
            return backend.zero_center()
        if math.isinf(value):
            if value > 0:
                return backend.max() - backend.from_u64(9)
            return backend.from_u64(8)

        mantissa = _scaled_mantissa(value)
        if not mantissa:
            return backend.zero_center()
        magnitude = backend.from_bytes(int_to_bytes(mantissa))
        if mantissa > 0:
            return magnitude
        return -magnitude + backend.zero_center()

    def encode_from_isize(self, value: int) -> BaseIntegerBackend:
        """
        Encode a signed integer.

        Args:
            value: Integer within the range of the configured width

        Raises:
            EncodingError: If the value is not an integer or does not fit the
                configured width

        """
        value = _checked_int(value)
        if not self.isize_min <= value <= self.isize_max:
            raise EncodingError(
                f"Value {value} is not a signed {self.int_bits}-bit integer"
            )
        backend = self.backend
        if value >= 0:
            return backend.zero_center() + backend.from_u64(value)
        if value == self.isize_min:
            # magnitude does not fit the signed width: use the raw bit pattern
            raw = value.to_bytes(self.int_bits // 8, "big", signed=True)
            return backend.zero_center() - backend.from_bytes(raw)
        return backend.zero_center() - backend.from_u64(-value)

    def encode_from_usize(self, value: int) -> BaseIntegerBackend:
        """
        Encode an unsigned integer.

        Args:
            value: Non-negative integer within the range of the configured width

        Raises:
            EncodingError: If the value is not an integer or does not fit the
                configured width

        """
        value = _checked_int(value)
        if not 0 <= value <= self.usize_max:
            raise EncodingError(
                f"Value {value} is not an unsigned {self.int_bits}-bit integer"
            )
        raw = value.to_bytes(self.int_bits // 8, "big")
        return self.backend.zero_center() + self.backend.from_bytes(raw)


def _scaled_mantissa(value: float) -> int:
    """Unscaled decimal mantissa of `value` after fixed point scaling by 2^254."""
    sign, digits, exponent = Decimal(F64_FORMAT.format(value)).as_tuple()
    mantissa = int("".join(map(str, digits)))
    # doubling at fixed scale
    mantissa <<= BITS_IN_ZERO
    for _ in range(-exponent - F64_DIGITS):
        if mantissa % 2:
            mantissa *= 5
        else:
            mantissa //= 2
    return -mantissa if sign else mantissa


def _checked_int(value) -> int:
    try:
        return integral(value)
    except (TypeError, ValueError) as err:
        raise EncodingError(f"Value {value!r} is not an integer") from err
