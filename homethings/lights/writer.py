"""Sending a signal to the light controller."""

from __future__ import annotations

import socket

from homethings.lights.command import Action, Subject


def encode(subject: Subject, action: Action) -> bytes:
    """The three bytes the controller expects: subject, tab, action."""
    return bytes((subject.value, ord("\t"), action.value))


def send(stream: socket.socket, subject: Subject, action: Action) -> int:
    """Write the signal on ``stream``; returns the number of bytes written."""
    return stream.send(encode(subject, action))