"""Core data models shared by the parser, the generators, and the CLI."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ArgType(enum.Enum):
    STR = "str"
    BOOL = "bool"
    STR_LIST = "list[str]"


@dataclass(frozen=True)
class ArgValue:
    """A typed annotation argument.

    With ``value`` left as ``None`` this is the placeholder stored in a
    recognized-argument table; after parsing it carries the literal.
    """

    type: ArgType
    value: str | bool | tuple[str, ...] | None = None


@dataclass(frozen=True)
class ArgExpression:
    name: str
    value: ArgValue
    offset: int | None = None


SERVICE_ARGS: dict[str, ArgValue] = {
    "uuid": ArgValue(ArgType.STR),
    "path": ArgValue(ArgType.STR),
    "primary": ArgValue(ArgType.BOOL),
}

CHARACTERISTIC_ARGS: dict[str, ArgValue] = {
    "uuid": ArgValue(ArgType.STR),
    "path": ArgValue(ArgType.STR),
    "service": ArgValue(ArgType.STR),
    "flags": ArgValue(ArgType.STR_LIST),
}


@dataclass(frozen=True)
class ServiceArgs:
    uuid: str
    path: str | None = None
    primary: bool = True


@dataclass(frozen=True)
class CharacteristicArgs:
    uuid: str
    flags: tuple[str, ...] = ()
    service: str | None = None
    path: str | None = None


class Capability(enum.Enum):
    READ = "read"
    WRITE = "write"
    NOTIFY = "notify"


class RegistrationState(enum.Enum):
    UNREGISTERED = "unregistered"
    REGISTERING = "registering"
    REGISTERED = "registered"
