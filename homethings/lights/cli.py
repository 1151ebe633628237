"""The ``lights`` command: send a signal to a light or serve the lights as Web Things."""

from __future__ import annotations

import socket
import sys
from dataclasses import dataclass

from homethings.config import ConfigurationError, config_path, load_config, parse_address
from homethings.lights import thing, writer
from homethings.lights.command import build_parser

_CONNECT_TIMEOUT = 10


@dataclass
class Configuration:
    address: str = "127.0.0.1:23"
    thing_port: int | None = None


def _configured_address(configuration: Configuration) -> tuple[str, int]:
    try:
        return parse_address(configuration.address)
    except ValueError as error:
        raise ConfigurationError(str(error)) from error


def main(argv: list[str] | None = None) -> int:
    try:
        path = config_path("lights")
        configuration = load_config(path, Configuration)
    except ConfigurationError as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    options = build_parser().parse_args(argv)

    if options.print_config_path:
        print(path)
        return 0

    try:
        address = (
            options.address
            if options.address is not None
            else _configured_address(configuration)
        )
    except ConfigurationError as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    if options.into_thing:
        port = options.thing_port if options.thing_port is not None else configuration.thing_port
        thing.run(address, port)
        return 0

    print(f"Sending a {options.action} to {options.subject}…")
    try:
        with socket.create_connection(address, timeout=_CONNECT_TIMEOUT) as stream:
            writer.send(stream, options.subject, options.action)
    except OSError as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1
    return 0