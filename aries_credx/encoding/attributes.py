"""Attribute specifications and encoding by declared kind."""

import logging

from collections import OrderedDict
from datetime import date, datetime, time, timezone
from typing import Any, Mapping, Sequence, Union

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load
from marshmallow.validate import OneOf

from .base import AttributeEncoder, BaseIntegerBackend
from .big_number import BigNumber
from .error import AttributeParseError, EncodingError
from .field_element import FieldElement
from .util import DigestFactory, integral

LOGGER = logging.getLogger(__name__)

ENCODING_UNIX_TIMESTAMP = "unixtimestamp"
ENCODING_DAYS_SINCE_1900 = "dayssince1900"
ENCODING_DECIMAL = "f64"
ENCODING_SIGNED = "isize"
ENCODING_UNSIGNED = "usize"
ENCODING_HASH = "utf8hash"
ENCODING_NULL = "null"

ENCODINGS = (
    ENCODING_UNIX_TIMESTAMP,
    ENCODING_DAYS_SINCE_1900,
    ENCODING_DECIMAL,
    ENCODING_SIGNED,
    ENCODING_UNSIGNED,
    ENCODING_HASH,
    ENCODING_NULL,
)

BACKENDS = {
    "field_element": FieldElement,
    "big_number": BigNumber,
}


def get_backend(name: str):
    """Look up an integer backend class by name."""
    try:
        return BACKENDS[name]
    except KeyError:
        raise EncodingError(
            f"Unsupported backend: {name!r}; expected one of {sorted(BACKENDS)}"
        ) from None


class AttrSpec:
    """Attribute name, value and the encoding to apply to it."""

    def __init__(self, name: str, encoding: str = None, value: Any = None):
        """
        Initialize attribute specification.

        Args:
            name: attribute name
            encoding: one of `ENCODINGS`; inferred from the value when omitted
            value: raw attribute value; None marks a missing value

        """
        self.name = name
        self.encoding = encoding or infer_encoding(value)
        self.value = value

    @classmethod
    def deserialize(cls, obj: Mapping) -> "AttrSpec":
        """Load an attribute specification from its dict representation."""
        try:
            return AttrSpecSchema(unknown=EXCLUDE).load(obj)
        except ValidationError as err:
            raise AttributeParseError(
                f"Invalid attribute specification: {err.messages}"
            ) from err

    def serialize(self) -> dict:
        """Dump to a dict representation."""
        return AttrSpecSchema().dump(self)

    def __eq__(self, other) -> bool:
        """Equality comparator."""
        if type(other) is not type(self):
            return False
        return (
            self.name == other.name
            and self.encoding == other.encoding
            and self.value == other.value
        )

    def __repr__(self) -> str:
        """Return a human readable representation."""
        return (
            f"<AttrSpec(name={self.name!r}, encoding={self.encoding!r}, "
            f"value={self.value!r})>"
        )


class AttrSpecSchema(Schema):
    """Attribute specification schema."""

    name = fields.Str(
        required=True,
        metadata={"description": "Attribute name", "example": "birthdate"},
    )
    encoding = fields.Str(
        required=False,
        load_default=None,
        validate=OneOf(ENCODINGS),
        allow_none=True,
        metadata={
            "description": "Encoding applied to the value",
            "example": ENCODING_DAYS_SINCE_1900,
        },
    )
    value = fields.Raw(
        required=False,
        load_default=None,
        allow_none=True,
        metadata={
            "description": "Raw attribute value, null when not available",
            "example": "1982-12-20T10:45:00.000-06:00",
        },
    )

    @post_load
    def make_model(self, data: dict, **kwargs) -> AttrSpec:
        """Return model instance after loading."""
        return AttrSpec(**data)


def infer_encoding(value: Any) -> str:
    """Choose an encoding from the python type of a raw value."""
    if value is None:
        return ENCODING_NULL
    if isinstance(value, bool):
        raise EncodingError(f"Cannot infer an encoding for {type(value)}")
    if isinstance(value, float):
        return ENCODING_DECIMAL
    if isinstance(value, int):
        return ENCODING_SIGNED
    if isinstance(value, datetime):
        return ENCODING_UNIX_TIMESTAMP
    if isinstance(value, date):
        # calendar dates as parsed from YAML, e.g. birthdates
        return ENCODING_DAYS_SINCE_1900
    if isinstance(value, str):
        return ENCODING_HASH
    raise EncodingError(f"Cannot infer an encoding for {type(value)}")


def _to_rfc3339(value: Union[str, date]) -> str:
    if isinstance(value, datetime):
        if not value.tzinfo:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, date):
        return datetime.combine(value, time(), tzinfo=timezone.utc).isoformat()
    return value


def encode_attribute(
    encoder: AttributeEncoder,
    value: Any,
    encoding: str = None,
    digest: Union[str, DigestFactory] = "sha256",
) -> BaseIntegerBackend:
    """
    Encode a single raw value with the given or inferred encoding.

    Missing values (None) always encode as the null sentinel. Numeric
    encodings accept their value in string form.

    Args:
        encoder: The attribute encoder for the target backend
        value: The raw value
        encoding: One of `ENCODINGS`; inferred from the value when omitted
        digest: Digest for the string hash encoding

    Returns:
        The encoded value

    Raises:
        AttributeParseError: If the value cannot be read for the encoding

    """
    encoding = encoding or infer_encoding(value)
    if value is None or encoding == ENCODING_NULL:
        return encoder.encoded_null()

    try:
        if encoding == ENCODING_UNIX_TIMESTAMP:
            return encoder.encode_from_rfc3339_as_unixtimestamp(_to_rfc3339(value))
        if encoding == ENCODING_DAYS_SINCE_1900:
            return encoder.encode_from_rfc3339_as_dayssince1900(_to_rfc3339(value))
        if encoding == ENCODING_DECIMAL:
            return encoder.encode_from_f64(float(value))
        if encoding == ENCODING_SIGNED:
            return encoder.encode_from_isize(integral(value))
        if encoding == ENCODING_UNSIGNED:
            return encoder.encode_from_usize(integral(value))
        if encoding == ENCODING_HASH:
            return encoder.encode_from_utf8_as_hash(str(value), digest)
    except (TypeError, ValueError) as err:
        raise AttributeParseError(
            f"Cannot encode {value!r} as {encoding}"
        ) from err

    raise EncodingError(f"Unsupported encoding: {encoding!r}")


def encode_attributes(
    encoder: AttributeEncoder,
    specs: Sequence[Union[AttrSpec, Mapping]],
    digest: Union[str, DigestFactory] = "sha256",
) -> "OrderedDict[str, BaseIntegerBackend]":
    """
    Encode a sequence of attribute specifications.

    Args:
        encoder: The attribute encoder for the target backend
        specs: Attribute specifications or their dict representations
        digest: Digest for the string hash encoding

    Returns:
        Encoded values keyed by attribute name, in input order

    """
    result = OrderedDict()
    for spec in specs:
        if not isinstance(spec, AttrSpec):
            spec = AttrSpec.deserialize(spec)
        if spec.name in result:
            raise EncodingError(f"Duplicate attribute name: {spec.name}")
        LOGGER.debug("Encoding attribute %s as %s", spec.name, spec.encoding)
        result[spec.name] = encode_attribute(
            encoder, spec.value, spec.encoding, digest
        )
    return result


def attr_value(raw: Any, encoded: BaseIntegerBackend) -> dict:
    """Raw and encoded (decimal string) pair for a credential attribute."""
    return {"raw": None if raw is None else str(raw), "encoded": str(int(encoded))}
