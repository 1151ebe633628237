"""Exposing every light as a Web Thing with a ``pulse`` property."""

from __future__ import annotations

import json
import socket
from dataclasses import dataclass
from typing import Any

from homethings.lights import writer
from homethings.lights.command import Action, Subject
from homethings.webthing import (
    Property,
    PropertyError,
    Thing,
    ThingServer,
    format_start_message,
)

_CONNECT_TIMEOUT = 10


@dataclass(frozen=True)
class PulseForwarder:
    """Sends a pulse to the light whenever its ``pulse`` property is written."""

    address: tuple[str, int]
    subject: Subject

    def __call__(self, value: Any) -> Any:
        print(
            f"Sending a {Action.PULSE} to {self.subject} "
            f"(value `{json.dumps(value)}`)…"
        )
        try:
            stream = socket.create_connection(self.address, timeout=_CONNECT_TIMEOUT)
        except OSError:
            raise PropertyError("Failed to connect to the light") from None
        with stream:
            try:
                writer.send(stream, self.subject, Action.PULSE)
            except OSError:
                raise PropertyError("Failed to send a pulse on a light") from None
        return value


def make_light(address: tuple[str, int], subject: Subject) -> Thing:
    thing = Thing(
        id=f"urn:dev:ops:light-{subject.value}",
        title=subject.label,
        types=["Light"],
    )
    thing.add_property(
        Property(
            "pulse",
            False,
            {
                "@type": "OnOffProperty",
                "title": "Pulse",
                "type": "boolean",
                "description": "Whether to turn the light on",
            },
            forwarder=PulseForwarder(address, subject),
        )
    )
    return thing


def make_lights(address: tuple[str, int]) -> list[Thing]:
    """One thing per light, in the order of :class:`Subject`."""
    return [make_light(address, subject) for subject in Subject]


def run(address: tuple[str, int], port: int | None) -> None:
    """Serve all the lights as Web Things."""
    things = make_lights(address)
    print(format_start_message(port))
    ThingServer(things, "Lights", port).start()