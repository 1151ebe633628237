"""The ``weather`` command: print home's weather or serve it as Web Things."""

from __future__ import annotations

import argparse
import pprint
import sys
from dataclasses import dataclass

from homethings.config import ConfigurationError, config_path, load_config
from homethings.weather import reader, thing


@dataclass
class Configuration:
    openweathermap_api_key: str = ""
    thing_port: int | None = None


def _port(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {text!r}") from None
    if not 0 <= value <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"invalid port: {text!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="weather")
    parser.add_argument(
        "-c", "--print-config-path", action="store_true",
        help="Prints the configuration path and exit.",
    )
    parser.add_argument(
        "-k", "--openweathermap-api-key", help="The OpenWeatherMap API key.",
    )
    parser.add_argument(
        "-t", "--into-thing", action="store_true",
        help="Turns this program into a Thing, i.e. a new Web of Things device.",
    )
    parser.add_argument(
        "-p", "--thing-port", type=_port,
        help="Port of the Thing. Requires --into-thing to be effective. "
        "This option overwrites the value read from the configuration file.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    try:
        path = config_path("weather")
        configuration = load_config(path, Configuration)
    except ConfigurationError as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    options = build_parser().parse_args(argv)

    if options.print_config_path:
        print(path)
        return 0

    api_key = (
        options.openweathermap_api_key
        if options.openweathermap_api_key is not None
        else configuration.openweathermap_api_key
    )

    if options.into_thing:
        port = options.thing_port if options.thing_port is not None else configuration.thing_port
        thing.run(api_key, port)
    else:
        print(pprint.pformat(reader.read(api_key)))

    return 0