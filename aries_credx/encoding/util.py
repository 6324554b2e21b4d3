"""Utilities for attribute encoding."""

import hashlib
import re

from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Any, Callable, Union

from .error import AttributeParseError, EncodingError

DIGEST_SIZE = 32
U64_MASK = 2**64 - 1
US_PER_DAY = 86_400_000_000

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

RFC3339_PATTERN = re.compile(
    r"(\d{4})-(\d\d)-(\d\d)[Tt ](\d\d):(\d\d):(\d\d)(\.\d+)?([Zz]|[+-]\d\d:\d\d)",
    re.ASCII,
)
HEX_PATTERN = re.compile(r"(-?)[0-9a-fA-F]+", re.ASCII)

DigestFactory = Callable[[bytes], Any]

DIGESTS = {
    "sha256": hashlib.sha256,
    "sha3_256": hashlib.sha3_256,
    "blake2b": partial(hashlib.blake2b, digest_size=DIGEST_SIZE),
    "blake2s": hashlib.blake2s,
}


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC3339 date-time string to a timezone-aware datetime.

    Unlike the lax parsing applied to stored timestamps, seconds and an
    explicit UTC offset are mandatory here.

    Args:
        value: The date-time string

    Returns:
        The parsed datetime, carrying the offset given in the input

    Raises:
        AttributeParseError: If the value is not a valid RFC3339 date-time

    """
    if not isinstance(value, str):
        raise AttributeParseError(f"Expected RFC3339 string, got {type(value)}")
    match = RFC3339_PATTERN.fullmatch(value)
    if not match:
        raise AttributeParseError(f"Invalid RFC3339 date-time: {value!r}")
    year, month, day, hour, minute, second = (int(match[i]) for i in range(1, 7))
    microsecond = int(match[7][1:7].ljust(6, "0")) if match[7] else 0
    if second == 60:
        # leap second
        second = 59
    tz = match[8]
    if tz in ("Z", "z"):
        tzinfo = timezone.utc
    else:
        tz_hours, tz_mins = int(tz[1:3]), int(tz[4:6])
        if tz_hours > 23 or tz_mins > 59:
            raise AttributeParseError(f"Invalid UTC offset in {value!r}")
        offset = timedelta(hours=tz_hours, minutes=tz_mins)
        tzinfo = timezone(-offset if tz[0] == "-" else offset)
    try:
        return datetime(
            year, month, day, hour, minute, second, microsecond, tzinfo=tzinfo
        )
    except ValueError as err:
        raise AttributeParseError(f"Invalid RFC3339 date-time: {value!r}") from err


def epoch_seconds(dt: datetime) -> int:
    """Signed whole seconds since the unix epoch, rounding toward the past."""
    return (dt - EPOCH) // timedelta(seconds=1)


def whole_days_between(start: datetime, end: datetime) -> int:
    """Signed whole days from `start` to `end`, truncated toward zero."""
    micros = (end - start) // timedelta(microseconds=1)
    days = abs(micros) // US_PER_DAY
    return days if micros >= 0 else -days


def as_u64(value: int) -> int:
    """Reinterpret a signed 64-bit value as unsigned (two's complement)."""
    return value & U64_MASK


def integral(value) -> int:
    """Integer value of a number or numeric string, refusing bools and fractions."""
    if isinstance(value, bool):
        raise TypeError(f"Boolean {value} is not an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"Value {value} is not integral")
    return int(value)


def parse_hex(value: str, signed: bool = False) -> int:
    """
    Parse a big-endian hex string of digits only.

    Prefixes, separators and whitespace are rejected.

    Raises:
        ValueError: If the string is not plain hex, or is negative when unsigned

    """
    match = HEX_PATTERN.fullmatch(value) if isinstance(value, str) else None
    if not match or (match[1] and not signed):
        raise ValueError(f"Invalid hex string: {value!r}")
    return int(value, 16)


def int_to_bytes(value: int) -> bytes:
    """Minimal big-endian magnitude bytes of an integer."""
    value = abs(value)
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def resolve_digest(digest: Union[str, DigestFactory]) -> DigestFactory:
    """
    Resolve a digest factory by name.

    Args:
        digest: A registered digest name or a hashlib-style constructor

    Returns:
        A callable producing a hash object when given the message bytes

    """
    if callable(digest):
        return digest
    try:
        return DIGESTS[digest]
    except KeyError:
        raise EncodingError(
            f"Unsupported digest: {digest!r}; expected one of {sorted(DIGESTS)}"
        ) from None


def hash_digest(data: bytes, digest: Union[str, DigestFactory] = "sha256") -> bytes:
    """Hash `data`, requiring a digest of exactly `DIGEST_SIZE` bytes."""
    result = resolve_digest(digest)(data).digest()
    if len(result) != DIGEST_SIZE:
        raise EncodingError(
            f"Digest must produce {DIGEST_SIZE} bytes, produced {len(result)}"
        )
    return result
