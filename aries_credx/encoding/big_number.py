"""Arbitrary precision integer backend."""

from .base import BITS_IN_ZERO, BaseIntegerBackend
from .error import BackendError
from .util import int_to_bytes, parse_hex

MAX_BYTES = 32


class BigNumber(BaseIntegerBackend):
    """
    Signed integer without a fixed width, for modulus-based signature schemes.

    No reduction or width normalization is applied.
    """

    __slots__ = ("_value",)

    def __init__(self, value: int = 0):
        """Initialize from an integer."""
        self._value = int(value)

    @classmethod
    def max(cls) -> "BigNumber":
        """Return the value of 32 bytes of `0xFF`."""
        return cls.from_bytes(b"\xff" * MAX_BYTES)

    @classmethod
    def zero_center(cls) -> "BigNumber":
        """Return 2^254."""
        return cls(1 << BITS_IN_ZERO)

    @classmethod
    def from_bytes(cls, data: bytes) -> "BigNumber":
        """Interpret big-endian bytes of any length as a non-negative integer."""
        return cls(int.from_bytes(bytes(data), "big"))

    @classmethod
    def from_u64(cls, value: int) -> "BigNumber":
        """Construct from an unsigned 64-bit integer."""
        if not 0 <= value < 2**64:
            raise BackendError(f"Value {value} is not an unsigned 64-bit integer")
        return cls(value)

    @classmethod
    def from_hex(cls, value: str) -> "BigNumber":
        """
        Construct from a big-endian hex string with an optional leading `-`.

        Raises:
            BackendError: If the string is not valid hex

        """
        try:
            return cls(parse_hex(value, signed=True))
        except (TypeError, ValueError):
            raise BackendError(f"Unable to convert {value!r} to a BigNumber") from None

    @property
    def is_negative(self) -> bool:
        """Whether the value is below zero."""
        return self._value < 0

    def to_bytes(self) -> bytes:
        """Minimal big-endian bytes of the magnitude; the sign is not encoded."""
        return int_to_bytes(self._value)

    def to_hex(self) -> str:
        """Serialize to a hex string, prefixed with `-` when negative."""
        return ("-" if self.is_negative else "") + (self.to_bytes().hex() or "0")

    def __add__(self, other: "BigNumber") -> "BigNumber":
        """Add two values."""
        if not isinstance(other, BigNumber):
            return NotImplemented
        return BigNumber(self._value + other._value)

    def __sub__(self, other: "BigNumber") -> "BigNumber":
        """Subtract a value."""
        if not isinstance(other, BigNumber):
            return NotImplemented
        return BigNumber(self._value - other._value)

    def __neg__(self) -> "BigNumber":
        """Flip the sign."""
        return BigNumber(-self._value)

    def __int__(self) -> int:
        """Integer value."""
        return self._value

    def __eq__(self, other) -> bool:
        """Compare values."""
        if not isinstance(other, BigNumber):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        """Hash the value."""
        return hash((BigNumber, self._value))

    def __repr__(self) -> str:
        """Return a human readable representation."""
        return f"BigNumber({self.to_hex()})"
