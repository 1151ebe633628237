"""Command-line options of the ``lights`` command: which light, which signal."""

from __future__ import annotations

import argparse
from enum import Enum
from typing import Callable, TypeVar

from homethings.config import parse_address

C = TypeVar("C", bound="_Choice")


class _Choice(Enum):
    """An enumeration chosen on the command line by its CamelCase name."""

    @property
    def cli_name(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))

    def __str__(self) -> str:
        return self.cli_name


def _lookup(cls: type[C], text: str) -> C:
    wanted = text.lower()
    for member in cls:
        if member.cli_name.lower() == wanted:
            return member
    names = ", ".join(member.cli_name for member in cls)
    raise ValueError(f"invalid value {text!r}: expected one of {names}")


class Subject(_Choice):
    """A light; its value is the byte sent to the controller."""

    LAUNDRY_ROOM = 0
    BATHROOM = 1
    LOUISE_BEDROOM = 2
    ELI_BEDROOM = 3
    HALL = 4
    LIVING_ROOM = 5
    SITTING_ROOM = 6
    DINING_TABLE = 7
    KITCHEN_ISLAND = 8
    KITCHEN = 9
    PARENT_BED = 10
    PARENT_BATHROOM = 11
    PARENT_BEDROOM = 12
    GREEN_HOUSE = 13

    @classmethod
    def parse(cls, text: str) -> Subject:
        """Find the light named ``text``, ignoring case."""
        return _lookup(cls, text)

    @property
    def label(self) -> str:
        """The human-readable name of the light."""
        return _LABELS[self]


_LABELS: dict[Subject, str] = {
    Subject.LAUNDRY_ROOM: "Buanderie",
    Subject.BATHROOM: "Salle de bain",
    Subject.LOUISE_BEDROOM: "Chambre Louise",
    Subject.ELI_BEDROOM: "Chambre Éli",
    Subject.HALL: "Entrée",
    Subject.LIVING_ROOM: "Espace de vie",
    Subject.SITTING_ROOM: "Canapé",
    Subject.DINING_TABLE: "Table à manger",
    Subject.KITCHEN_ISLAND: "Îlot",
    Subject.KITCHEN: "Cuisine",
    Subject.PARENT_BED: "Lit parental",
    Subject.PARENT_BATHROOM: "Salle de bain parents",
    Subject.PARENT_BEDROOM: "Suite parentale",
    Subject.GREEN_HOUSE: "Serre",
}


class Action(_Choice):
    """A signal sent to a light; its value is the byte sent to the controller."""

    PULSE = 0

    @classmethod
    def parse(cls, text: str) -> Action:
        """Find the action named ``text``, ignoring case."""
        return _lookup(cls, text)


def _choice(parse: Callable[[str], C]) -> Callable[[str], C]:
    def convert(text: str) -> C:
        try:
            return parse(text)
        except ValueError as error:
            raise argparse.ArgumentTypeError(str(error)) from None

    return convert


def _address(text: str) -> tuple[str, int]:
    try:
        return parse_address(text)
    except ValueError as error:
        raise argparse.ArgumentTypeError(str(error)) from None


def _port(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {text!r}") from None
    if not 0 <= value <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"invalid port: {text!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lights")
    parser.add_argument(
        "-a", "--address", type=_address,
        help="Address of the controller, e.g. 192.168.1.42:23. "
        "This option overwrites the value read from the configuration file.",
    )
    parser.add_argument(
        "-s", "--subject", type=_choice(Subject.parse), default=Subject.LIVING_ROOM,
        metavar="{" + ",".join(s.cli_name for s in Subject) + "}",
        help="Light to control.",
    )
    parser.add_argument(
        "-x", "--action", type=_choice(Action.parse), default=Action.PULSE,
        metavar="{" + ",".join(a.cli_name for a in Action) + "}",
        help="Type of signal/event to send on the light.",
    )
    parser.add_argument(
        "-c", "--print-config-path", action="store_true",
        help="Prints the configuration path and exit.",
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