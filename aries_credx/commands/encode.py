"""Encode command for converting attribute values to cryptographic integers."""

import json
import logging

from typing import List, Sequence

import yaml
from configargparse import ArgumentParser

from ..config import argparse as arg
from ..config.base import BaseSettings, SettingsError
from ..config.error import ArgsParseError
from ..config.settings import Settings
from ..config.util import build_encoder, common_config
from ..core.error import BaseError
from ..encoding.attributes import AttrSpec, attr_value, encode_attributes
from ..encoding.error import EncodingError

from . import PROG

LOGGER = logging.getLogger(__name__)


class EncodeError(BaseError):
    """Base exception for encode command errors."""


def init_argument_parser(parser: ArgumentParser):
    """Initialize an argument parser with the module's arguments."""
    return arg.load_argument_groups(parser, *arg.group.get_registered(arg.CAT_ENCODE))


def load_attributes_file(path: str) -> List[dict]:
    """Load a list of attribute specifications from a YAML or JSON file."""
    try:
        with open(path, "r", encoding="utf-8") as stream:
            specs = yaml.safe_load(stream)
    except (OSError, yaml.YAMLError) as err:
        raise EncodeError(f"Unable to read attributes file {path}") from err
    if not isinstance(specs, list):
        raise EncodeError(f"Attributes file {path} must hold a list")
    return specs


def encode(settings: BaseSettings) -> dict:
    """
    Encode the attributes named in the settings.

    Returns:
        A dict mapping attribute name to its raw and encoded values

    Raises:
        EncodeError: If the settings or an attribute cannot be encoded

    """
    specs = list(settings.get_value("encode.attributes") or ())
    attributes_file = settings.get_str("encode.attributes_file")
    if attributes_file:
        specs.extend(load_attributes_file(attributes_file))

    try:
        encoder = build_encoder(settings)
        LOGGER.debug("Encoding %d attribute(s) with %r", len(specs), encoder)
        specs = [
            spec if isinstance(spec, AttrSpec) else AttrSpec.deserialize(spec)
            for spec in specs
        ]
        encoded = encode_attributes(
            encoder, specs, settings.get_str("encoding.digest", default="sha256")
        )
    except (EncodingError, SettingsError) as err:
        raise EncodeError("Error encoding attributes") from err

    return {spec.name: attr_value(spec.value, encoded[spec.name]) for spec in specs}


def execute(argv: Sequence[str] = None):
    """Entrypoint."""
    parser = arg.create_argument_parser(prog=PROG)
    parser.prog += " encode"
    get_settings = init_argument_parser(parser)
    args = parser.parse_args(argv)
    settings = Settings(get_settings(args))
    if "encode.attributes" not in settings and "encode.attributes_file" not in settings:
        parser.print_help()
        raise ArgsParseError("No attributes to encode: use --attr or --attributes")
    common_config(settings)

    try:
        result = encode(settings)
    except EncodeError as err:
        LOGGER.debug("Encode failed", exc_info=True)
        raise SystemExit(f"{parser.prog}: {err.roll_up}") from err
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    execute()
