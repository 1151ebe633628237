"""Locating, creating and loading the TOML configuration files of the commands."""

from __future__ import annotations

import dataclasses
import ipaddress
import tomllib
import types
import typing
from pathlib import Path
from typing import Any, TypeVar

import platformdirs
import tomli_w

T = TypeVar("T")

_NONE_TYPE = type(None)

_TYPE_NAMES: dict[str, type] = {
    "int": int,
    "float": float,
    "str": str,
    "bool": bool,
    "None": _NONE_TYPE,
    "NoneType": _NONE_TYPE,
    "list": list,
    "dict": dict,
    "tuple": tuple,
}


class ConfigurationError(Exception):
    """Raised when a configuration file cannot be located, read, written or parsed."""


def config_path(name: str) -> Path:
    """Return the path of the configuration file of the program called ``name``."""
    directory = platformdirs.user_config_dir(name, appauthor=False)
    if not directory:
        raise ConfigurationError("Failed to find the configuration directory.")
    return Path(directory) / f"{name}.toml"


def load_config(path: str | Path, factory: type[T]) -> T:
    """Load a configuration dataclass from ``path``.

    When the file does not exist, it is created with the defaults of
    ``factory`` and those defaults are returned. Unknown keys are ignored;
    a missing key is an error unless its field is optional.
    """
    if not (isinstance(factory, type) and dataclasses.is_dataclass(factory)):
        raise TypeError("the configuration factory must be a dataclass")

    path = Path(path)
    if not path.exists():
        default = factory()
        _write(path, default)
        return default

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as error:
        raise ConfigurationError(f"failed to read `{path}`: {error}") from error

    arguments: dict[str, Any] = {}
    for field in dataclasses.fields(factory):
        if not field.init:
            continue
        kinds = _alternatives(field.type)
        if field.name in data:
            value = data[field.name]
            if not _matches(value, kinds):
                raise ConfigurationError(f"invalid type for field `{field.name}`")
            arguments[field.name] = value
        elif kinds is None or _NONE_TYPE not in kinds:
            raise ConfigurationError(f"missing field `{field.name}`")

    try:
        return factory(**arguments)
    except (TypeError, ValueError) as error:
        raise ConfigurationError(str(error)) from error


def parse_address(text: str) -> tuple[str, int]:
    """Parse a socket address such as ``127.0.0.1:23`` or ``[::1]:502``."""
    if text.startswith("["):
        host, separator, port = text[1:].partition("]:")
        if not separator:
            raise ValueError(f"invalid socket address: {text!r}")
        try:
            ipaddress.IPv6Address(host)
        except ValueError as error:
            raise ValueError(f"invalid socket address: {text!r}") from error
    else:
        host, separator, port = text.rpartition(":")
        if not separator:
            raise ValueError(f"invalid socket address: {text!r}")
        try:
            ipaddress.IPv4Address(host)
        except ValueError as error:
            raise ValueError(f"invalid socket address: {text!r}") from error

    if not (port.isascii() and port.isdigit()) or int(port) > 0xFFFF:
        raise ValueError(f"invalid port in socket address: {text!r}")
    return host, int(port)


def _write(path: Path, configuration: Any) -> None:
    data = {
        key: value
        for key, value in dataclasses.asdict(configuration).items()
        if value is not None
    }
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(tomli_w.dumps(data), encoding="utf-8")
    except OSError as error:
        raise ConfigurationError(f"failed to write `{path}`: {error}") from error


def _alternatives(hint: Any) -> list[type] | None:
    """The types a field accepts, or ``None`` when any value is accepted."""
    if isinstance(hint, str):
        text = hint.strip()
        if text.startswith("Optional[") and text.endswith("]"):
            text = text[len("Optional[") : -1] + " | None"
        kinds: list[type] = []
        for part in text.split("|"):
            base = part.split("[", 1)[0].strip().removeprefix("typing.")
            kind = _TYPE_NAMES.get(base)
            if kind is None:
                return None
            kinds.append(kind)
        return kinds
    if hint is Any:
        return None
    if hint is None:
        return [_NONE_TYPE]
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        kinds = []
        for argument in typing.get_args(hint):
            inner = _alternatives(argument)
            if inner is None:
                return None
            kinds.extend(inner)
        return kinds
    origin = typing.get_origin(hint)
    if origin is not None:
        hint = origin
    return [hint] if isinstance(hint, type) else None


def _matches(value: Any, kinds: list[type] | None) -> bool:
    if kinds is None:
        return True
    return any(_matches_one(value, kind) for kind in kinds)


def _matches_one(value: Any, kind: type) -> bool:
    if kind is _NONE_TYPE:
        return value is None
    if kind is bool:
        return isinstance(value, bool)
    if kind is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if kind is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, kind)