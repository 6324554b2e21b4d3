"""BLS12-381 scalar field element backend."""

from .base import BITS_IN_ZERO, BaseIntegerBackend
from .error import BackendError
from .util import parse_hex

# order of the BLS12-381 G1/G2 subgroups
CURVE_ORDER = 0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001
FIELD_ELEMENT_SIZE = 32


class FieldElement(BaseIntegerBackend):
    """
    Element of the BLS12-381 scalar field.

    Values are always reduced modulo the curve order and serialize to
    `FIELD_ELEMENT_SIZE` big-endian bytes.
    """

    __slots__ = ("_value",)

    def __init__(self, value: int = 0):
        """Initialize a field element from an integer, reducing it."""
        self._value = int(value) % CURVE_ORDER

    @classmethod
    def max(cls) -> "FieldElement":
        """Return the highest field element."""
        return cls(CURVE_ORDER - 1)

    @classmethod
    def zero_center(cls) -> "FieldElement":
        """Return 2^254 as a field element."""
        return cls(1 << BITS_IN_ZERO)

    @classmethod
    def from_bytes(cls, data: bytes) -> "FieldElement":
        """
        Canonicalize big-endian bytes to a field element.

        Shorter input is left-padded with zero bytes; longer input keeps only
        its leading `FIELD_ELEMENT_SIZE` bytes.
        """
        data = bytes(data)
        if len(data) < FIELD_ELEMENT_SIZE:
            data = data.rjust(FIELD_ELEMENT_SIZE, b"\x00")
        elif len(data) > FIELD_ELEMENT_SIZE:
            data = data[:FIELD_ELEMENT_SIZE]
        return cls(int.from_bytes(data, "big"))

    @classmethod
    def from_u64(cls, value: int) -> "FieldElement":
        """Construct a field element from an unsigned 64-bit integer."""
        if not 0 <= value < 2**64:
            raise BackendError(f"Value {value} is not an unsigned 64-bit integer")
        return cls(value)

    @classmethod
    def from_hex(cls, value: str) -> "FieldElement":
        """
        Construct a field element from a big-endian hex string.

        Raises:
            BackendError: If the string is not valid hex

        """
        try:
            return cls(parse_hex(value))
        except (TypeError, ValueError):
            raise BackendError(
                f"Unable to convert {value!r} to a FieldElement"
            ) from None

    def to_bytes(self) -> bytes:
        """Serialize to `FIELD_ELEMENT_SIZE` big-endian bytes."""
        return self._value.to_bytes(FIELD_ELEMENT_SIZE, "big")

    def to_hex(self) -> str:
        """Serialize to a zero-padded big-endian hex string."""
        return self.to_bytes().hex()

    def __add__(self, other: "FieldElement") -> "FieldElement":
        """Add modulo the curve order."""
        if not isinstance(other, FieldElement):
            return NotImplemented
        return FieldElement(self._value + other._value)

    def __sub__(self, other: "FieldElement") -> "FieldElement":
        """Subtract modulo the curve order."""
        if not isinstance(other, FieldElement):
            return NotImplemented
        return FieldElement(self._value - other._value)

    def __neg__(self) -> "FieldElement":
        """Additive inverse."""
        return FieldElement(-self._value)

    def __int__(self) -> int:
        """Reduced integer value."""
        return self._value

    def __eq__(self, other) -> bool:
        """Compare reduced values."""
        if not isinstance(other, FieldElement):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        """Hash the reduced value."""
        return hash((FieldElement, self._value))

    def __repr__(self) -> str:
        """Return a human readable representation."""
        return f"FieldElement(0x{self.to_hex()})"
