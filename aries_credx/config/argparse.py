"""Command line option parsing."""

import abc

from typing import List, Type

from configargparse import ArgumentParser, Namespace, YAMLConfigFileParser

from ..encoding.attributes import BACKENDS, ENCODING_NULL, ENCODINGS
from ..encoding.util import DIGESTS
from .error import ArgsParseError
from .util import BoundedInt

CAT_ENCODE = "encode"


class ArgumentGroup(abc.ABC):
    """A class representing a group of related command line arguments."""

    GROUP_NAME = None

    @abc.abstractmethod
    def add_arguments(self, parser: ArgumentParser):
        """Add arguments to the provided argument parser."""

    @abc.abstractmethod
    def get_settings(self, args: Namespace) -> dict:
        """Extract settings from the parsed arguments."""


class group:
    """Decorator for registering argument groups."""

    _registered = []

    def __init__(self, *categories):
        """Initialize the decorator."""
        self.categories = tuple(categories)

    def __call__(self, group_cls: ArgumentGroup):
        """Register a class in the given categories."""
        setattr(group_cls, "CATEGORIES", self.categories)
        self._registered.append((self.categories, group_cls))
        return group_cls

    @classmethod
    def get_registered(cls, category: str = None):
        """Fetch the set of registered classes in a category."""
        return (
            grp
            for (cats, grp) in cls._registered
            if category is None or category in cats
        )


def create_argument_parser(*, prog: str = None):
    """Create an instance of an arg parser, force yaml format for external config."""
    return ArgumentParser(config_file_parser_class=YAMLConfigFileParser, prog=prog)


def load_argument_groups(parser: ArgumentParser, *groups: Type[ArgumentGroup]):
    """
    Log a set of argument groups into a parser.

    Returns:
        A callable to convert loaded arguments into a settings dictionary

    """
    group_inst = []
    for group in groups:
        g_parser = parser.add_argument_group(group.GROUP_NAME)
        inst = group()
        inst.add_arguments(g_parser)
        group_inst.append(inst)

    def get_settings(args: Namespace):
        settings = {}
        try:
            for group in group_inst:
                settings.update(group.get_settings(args))
        except ArgsParseError as e:
            parser.print_help()
            raise e
        return settings

    return get_settings


def parse_attr_arg(arg: str) -> dict:
    """
    Parse an attribute given on the command line.

    Accepts `<name>=<encoding>:<value>`, `<name>=<value>` for a string value
    (hashed, as command line values carry no type), or a bare `<name>` for a
    missing value.
    """
    name, sep, rest = arg.partition("=")
    name = name.strip()
    if not name:
        raise ArgsParseError(f"Attribute name missing in '{arg}'")
    if not sep:
        return {"name": name, "encoding": ENCODING_NULL, "value": None}
    encoding, sep, value = rest.partition(":")
    if sep and encoding in ENCODINGS:
        if encoding == ENCODING_NULL:
            value = None
        return {"name": name, "encoding": encoding, "value": value}
    return {"name": name, "value": rest}


@group(CAT_ENCODE)
class GeneralGroup(ArgumentGroup):
    """General settings."""

    GROUP_NAME = "General"

    def add_arguments(self, parser: ArgumentParser):
        """Add general command line arguments to the parser."""
        parser.add_argument(
            "--arg-file",
            is_config_file=True,
            help=(
                "Load command arguments from the specified file.  Note that "
                "this file *must* be in YAML format."
            ),
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract general settings."""
        return {}


@group(CAT_ENCODE)
class EncodingGroup(ArgumentGroup):
    """Encoding settings."""

    GROUP_NAME = "Encoding"

    def add_arguments(self, parser: ArgumentParser):
        """Add encoding-specific command line arguments to the parser."""
        parser.add_argument(
            "--backend",
            type=str,
            choices=sorted(BACKENDS),
            default="field_element",
            env_var="CREDX_BACKEND",
            help=(
                "Integer backend for encoded values: 'field_element' for "
                "BLS12-381 field elements, 'big_number' for unbounded integers. "
                "Default: field_element."
            ),
        )
        parser.add_argument(
            "--digest",
            type=str,
            choices=sorted(DIGESTS),
            default="sha256",
            env_var="CREDX_DIGEST",
            help="Digest used to encode string attributes. Default: sha256.",
        )
        parser.add_argument(
            "--int-bits",
            type=BoundedInt(min=8, max=64, step=8),
            default=64,
            metavar="<bits>",
            env_var="CREDX_INT_BITS",
            help="Width of signed and unsigned integer attributes. Default: 64.",
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract encoding settings."""
        return {
            "encoding.backend": args.backend,
            "encoding.digest": args.digest,
            "encoding.int_bits": args.int_bits,
        }


@group(CAT_ENCODE)
class AttributesGroup(ArgumentGroup):
    """Attribute input settings."""

    GROUP_NAME = "Attributes"

    def add_arguments(self, parser: ArgumentParser):
        """Add attribute input arguments to the parser."""
        parser.add_argument(
            "--attr",
            dest="attrs",
            type=str,
            action="append",
            metavar="<name>=[<encoding>:]<value>",
            help=(
                "Attribute to encode. Multiple instances of this parameter can be "
                f"specified. Encodings: {', '.join(ENCODINGS)}. A value given "
                "without an encoding is hashed as utf8hash, so numbers and dates "
                "need an explicit kind such as isize:42. A bare <name> encodes a "
                "missing value."
            ),
        )
        parser.add_argument(
            "--attributes",
            dest="attributes_file",
            type=str,
            metavar="<path>",
            env_var="CREDX_ATTRIBUTES",
            help=(
                "YAML or JSON file holding a list of attribute specifications, "
                "each with 'name', 'encoding' and 'value' keys."
            ),
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract attribute settings."""
        settings = {}
        attrs: List[dict] = [parse_attr_arg(arg) for arg in args.attrs or ()]
        if attrs:
            settings["encode.attributes"] = attrs
        if args.attributes_file:
            settings["encode.attributes_file"] = args.attributes_file
        return settings


@group(CAT_ENCODE)
class LoggingGroup(ArgumentGroup):
    """Logging settings."""

    GROUP_NAME = "Logging"

    def add_arguments(self, parser: ArgumentParser):
        """Add logging-specific command line arguments to the parser."""
        parser.add_argument(
            "--log-config",
            dest="log_config",
            type=str,
            metavar="<path-to-config>",
            default=None,
            env_var="CREDX_LOG_CONFIG",
            help="Specifies a custom logging configuration file",
        )
        parser.add_argument(
            "--log-file",
            dest="log_file",
            type=str,
            metavar="<log-file>",
            default=None,
            env_var="CREDX_LOG_FILE",
            help=(
                "Overrides the output destination for the root logger (as defined "
                "by the log config file) to the named <log-file>."
            ),
        )
        parser.add_argument(
            "--log-level",
            dest="log_level",
            type=str,
            metavar="<log-level>",
            default=None,
            env_var="CREDX_LOG_LEVEL",
            help=(
                "Specifies a custom logging level as one of: "
                "('trace', 'debug', 'info', 'warning', 'error', 'critical')"
            ),
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract logging settings."""
        settings = {}
        if args.log_config:
            settings["log.config"] = args.log_config
        if args.log_file:
            settings["log.file"] = args.log_file
        if args.log_level:
            settings["log.level"] = args.log_level
        return settings
