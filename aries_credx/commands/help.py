"""Help command: list the commands, or describe one of them."""

from typing import Sequence

from configargparse import ArgumentParser

from ..version import __version__


def execute(argv: Sequence[str] = None):
    """
    Print usage for all commands, or for the command named in `argv`.

    `credx help encode` shows the options of the encode command without
    running it.
    """
    from . import PROG, available_commands, load_command

    parser = ArgumentParser(
        prog=PROG,
        description="Encode credential attribute values as cryptographic integers.",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    subparsers = parser.add_subparsers(
        dest="command", title="commands", metavar="<command>"
    )
    for cmd in available_commands():
        if cmd["name"] == "help":
            continue
        module = load_command(cmd["name"])
        subparser = subparsers.add_parser(
            cmd["name"], help=cmd["summary"], description=cmd["summary"]
        )
        module.init_argument_parser(subparser)

    args = parser.parse_args(argv)
    if args.command:
        subparsers.choices[args.command].print_help()
    else:
        parser.print_help()


if __name__ == "__main__":
    execute()
