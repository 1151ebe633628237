"""A small Web of Things server: things, their properties and an HTTP front end."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable
from urllib.parse import urlsplit

DEFAULT_PORT = 80

_LOG = logging.getLogger(__name__)

_JSON_TYPES: dict[str, Callable[[Any], bool]] = {
    "boolean": lambda v: isinstance(v, bool),
    "integer": lambda v: (isinstance(v, int) and not isinstance(v, bool))
    or (isinstance(v, float) and v.is_integer()),
    "number": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    "string": lambda v: isinstance(v, str),
    "object": lambda v: isinstance(v, dict),
    "array": lambda v: isinstance(v, list),
    "null": lambda v: v is None,
}


class PropertyError(Exception):
    """Raised when a property cannot be found or given a new value."""


@dataclass
class Property:
    """A named value of a thing, described by its metadata."""

    name: str
    value: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)
    forwarder: Callable[[Any], Any] | None = None
    href_prefix: str = ""

    @property
    def href(self) -> str:
        return f"{self.href_prefix}/properties/{self.name}"

    def _validate(self, value: Any) -> None:
        if self.metadata.get("readOnly"):
            raise PropertyError("Read-only property")
        check = _JSON_TYPES.get(self.metadata.get("type", ""))
        if check is not None and not check(value):
            raise PropertyError("Invalid property value")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            minimum = self.metadata.get("minimum")
            maximum = self.metadata.get("maximum")
            if minimum is not None and value < minimum:
                raise PropertyError("Invalid property value")
            if maximum is not None and value > maximum:
                raise PropertyError("Invalid property value")
        if "enum" in self.metadata and value not in self.metadata["enum"]:
            raise PropertyError("Invalid property value")

    def set_value(self, value: Any) -> None:
        """Validate ``value``, pass it through the forwarder if any, then store it."""
        self._validate(value)
        if self.forwarder is not None:
            value = self.forwarder(value)
        self.value = value

    def description(self) -> dict[str, Any]:
        """Return the property description: its metadata plus its link."""
        description = dict(self.metadata)
        description["links"] = [{"rel": "property", "href": self.href}]
        return description


@dataclass
class Thing:
    """A device exposing properties; subscribers are told of every change."""

    id: str
    title: str
    types: list[str] = field(default_factory=list)
    description: str | None = None
    properties: dict[str, Property] = field(default_factory=dict)
    subscribers: list[Callable[[str, Any], None]] = field(default_factory=list)
    href_prefix: str = ""
    _lock: threading.RLock = field(
        default_factory=threading.RLock, init=False, repr=False, compare=False
    )

    def add_property(self, prop: Property) -> None:
        with self._lock:
            prop.href_prefix = self.href_prefix
            self.properties[prop.name] = prop

    def find_property(self, name: str) -> Property | None:
        return self.properties.get(name)

    def update_property(self, name: str, value: Any) -> None:
        """Replace the cached value of a property and notify the subscribers."""
        with self._lock:
            prop = self.find_property(name)
            if prop is None:
                raise PropertyError(f"Cannot find the property `{name}`")
            prop.value = value
            self._notify(name, value)

    def as_description(self) -> dict[str, Any]:
        with self._lock:
            prefix = self.href_prefix
            description: dict[str, Any] = {
                "id": self.id,
                "title": self.title,
                "href": prefix or "/",
                "properties": {
                    name: prop.description() for name, prop in self.properties.items()
                },
                "actions": {},
                "events": {},
                "links": [
                    {"rel": "properties", "href": f"{prefix}/properties"},
                    {"rel": "actions", "href": f"{prefix}/actions"},
                    {"rel": "events", "href": f"{prefix}/events"},
                ],
            }
            if self.types:
                description["@type"] = list(self.types)
            if self.description is not None:
                description["description"] = self.description
            return description

    def _set_href_prefix(self, prefix: str) -> None:
        with self._lock:
            self.href_prefix = prefix
            for prop in self.properties.values():
                prop.href_prefix = prefix

    def _write_property(self, name: str, value: Any) -> Any:
        with self._lock:
            prop = self.find_property(name)
            if prop is None:
                raise PropertyError(f"Cannot find the property `{name}`")
            prop.set_value(value)
            self._notify(name, prop.value)
            return prop.value

    def _notify(self, name: str, value: Any) -> None:
        for subscriber in list(self.subscribers):
            subscriber(name, value)


class _Handler(BaseHTTPRequestHandler):
    server: _HTTPServer

    def _dispatch(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else None
        status, payload = self.server.thing_server.handle(self.command, self.path, body)
        data = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    do_GET = do_PUT = do_POST = do_DELETE = _dispatch

    def log_message(self, format: str, *args: Any) -> None:
        _LOG.debug("%s - %s", self.address_string(), format % args)


class _HTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], thing_server: ThingServer):
        self.thing_server = thing_server
        super().__init__(address, _Handler)


class ThingServer:
    """Serves several things over HTTP, each under ``/<index>``."""

    def __init__(
        self,
        things: list[Thing],
        name: str,
        port: int | None = None,
        hostname: str = "",
    ):
        self.things = list(things)
        self.name = name
        self.port = port
        self.hostname = hostname
        self.ready = threading.Event()
        self._httpd: _HTTPServer | None = None
        for index, thing in enumerate(self.things):
            thing._set_href_prefix(f"/{index}")

    def handle(self, method: str, path: str, body: bytes | str | None) -> tuple[int, Any]:
        """Answer one request; returns the HTTP status and a JSON-ready payload."""
        method = method.upper()
        segments = [segment for segment in urlsplit(path).path.split("/") if segment]

        if not segments:
            if method != "GET":
                return 405, {"error": "Method not allowed"}
            return 200, [thing.as_description() for thing in self.things]

        index, *rest = segments
        if not (index.isascii() and index.isdigit()) or int(index) >= len(self.things):
            return 404, {"error": "Thing not found"}
        thing = self.things[int(index)]

        match rest:
            case []:
                if method != "GET":
                    return 405, {"error": "Method not allowed"}
                return 200, thing.as_description()
            case ["properties"]:
                if method != "GET":
                    return 405, {"error": "Method not allowed"}
                return 200, {name: prop.value for name, prop in thing.properties.items()}
            case ["properties", name]:
                return self._handle_property(thing, method, name, body)
            case ["actions", *_]:
                if method == "GET":
                    return 200, []
                if method == "POST":
                    return 400, {"error": "Unknown action"}
                return 405, {"error": "Method not allowed"}
            case ["events", *_]:
                if method != "GET":
                    return 405, {"error": "Method not allowed"}
                return 200, []
            case _:
                return 404, {"error": "Not found"}

    def _handle_property(
        self, thing: Thing, method: str, name: str, body: bytes | str | None
    ) -> tuple[int, Any]:
        prop = thing.find_property(name)
        if prop is None:
            return 404, {"error": "Property not found"}
        if method == "GET":
            return 200, {name: prop.value}
        if method != "PUT":
            return 405, {"error": "Method not allowed"}
        try:
            payload = json.loads(body) if body else None
        except (ValueError, UnicodeDecodeError):
            return 400, {"error": "Invalid JSON body"}
        if not isinstance(payload, dict) or name not in payload:
            return 400, {"error": "Invalid property request"}
        try:
            value = thing._write_property(name, payload[name])
        except PropertyError as error:
            return 400, {"error": str(error)}
        return 200, {name: value}

    def start(self) -> None:
        """Bind the socket and serve until :meth:`stop` is called."""
        httpd = _HTTPServer(
            (self.hostname, DEFAULT_PORT if self.port is None else self.port), self
        )
        self.port = httpd.server_address[1]
        self._httpd = httpd
        self.ready.set()
        try:
            httpd.serve_forever()
        finally:
            httpd.server_close()

    def stop(self) -> None:
        httpd, self._httpd = self._httpd, None
        if httpd is not None:
            httpd.shutdown()
        self.ready.clear()


def format_start_message(port: int | None) -> str:
    shown = "[default]" if port is None else str(port)
    return f"Starting the Things server (port {shown})…"