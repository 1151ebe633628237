"""The ``alfen`` command: read from, or write to, the charging station."""

from __future__ import annotations

import argparse
import pprint
import sys
from dataclasses import dataclass

from homethings.alfen import modbus, reader, thing, writer
from homethings.config import ConfigurationError, config_path, load_config, parse_address

_FORMATS = ("Text", "Json")


@dataclass
class Configuration:
    address: str = "127.0.0.1:502"
    thing_port: int | None = None


def _address(text: str) -> tuple[str, int]:
    try:
        return parse_address(text)
    except ValueError as error:
        raise argparse.ArgumentTypeError(str(error)) from None


def _u16(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid value: {text!r}") from None
    if not 0 <= value <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"invalid value: {text!r}")
    return value


def _read_format(text: str) -> str:
    for name in _FORMATS:
        if name.lower() == text.lower():
            return name
    raise argparse.ArgumentTypeError(
        f"invalid format {text!r}: expected one of {', '.join(_FORMATS)}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="alfen",
        description="Read values from, or write new values to, an Alfen charging station.",
    )
    parser.add_argument(
        "-a", "--address", type=_address,
        help="Modbus address of the station, e.g. 192.168.1.142:502. "
        "This option overwrites the value read from the configuration file.",
    )
    parser.add_argument(
        "-c", "--print-config-path", action="store_true",
        help="Print the configuration path and exit.",
    )
    commands = parser.add_subparsers(dest="kind")

    read = commands.add_parser("read", help="Read values from the station.")
    read.add_argument(
        "-f", "--format", type=_read_format, default="Text",
        metavar="{" + ",".join(_FORMATS) + "}", help="Define the kind of outputs.",
    )
    read.add_argument(
        "-t", "--into-thing", action="store_true",
        help="Turns this program into a Thing, i.e. a new Web of Things device.",
    )
    read.add_argument(
        "-p", "--thing-port", type=_u16,
        help="Port of the Thing. Requires --into-thing to be effective. "
        "This option overwrites the value read from the configuration file.",
    )

    write = commands.add_parser("write", help="Write values to the station.")
    write.add_argument(
        "-c", "--socket-current", type=_u16,
        help="Update the applied current of the socket.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    try:
        path = config_path("alfen")
        configuration = load_config(path, Configuration)
    except ConfigurationError as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    options = build_parser().parse_args(argv)

    if options.print_config_path:
        print(path)
        return 0

    if options.kind is None:
        print("Error: Must precise a command kind (like `read`).", file=sys.stderr)
        return 1

    if options.address is not None:
        address = options.address
    else:
        try:
            address = parse_address(configuration.address)
        except ValueError as error:
            print(f"Error: {error}", file=sys.stderr)
            return 1

    if options.kind == "read" and options.into_thing:
        port = options.thing_port if options.thing_port is not None else configuration.thing_port
        thing.run(address, port)
        return 0

    try:
        with modbus.connect(address) as client:
            state = reader.read(client)
            if options.kind == "read":
                if options.format == "Json":
                    print(state.to_json())
                else:
                    print(pprint.pformat(state))
            elif options.socket_current is not None:
                writer.set_socket_current(client, state, options.socket_current)
    except (OSError, ValueError) as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1
    return 0