"""org.bluez.GattCharacteristic1 objects generated from characteristic declarations.

This module keeps D-Bus signature strings as live annotations, so it must not
use postponed evaluation of annotations.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from dbus_fast.constants import PropertyAccess
from dbus_fast.service import dbus_property, method

from gattdecl.bus.base import Bus
from gattdecl.core.arg_parser import parse_characteristic_args
from gattdecl.core.capabilities import select_capabilities
from gattdecl.core.errors import MissingHandlerError
from gattdecl.core.model import Capability, CharacteristicArgs
from gattdecl.core.paths import ROOT_PATH
from gattdecl.gatt.entity import GattEntity, build_entity_class, declaration_source

CHARACTERISTIC_INTERFACE = "org.bluez.GattCharacteristic1"
LOGGER = logging.getLogger(__name__)


async def _call_handler(handler: Callable[..., Any], *args: Any) -> Any:
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _as_bytes(value: Any, source: str) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"{source} must produce bytes, bytearray or memoryview, got {type(value).__name__}")
    return bytes(value)


class GattCharacteristic(GattEntity):
    interface_name = CHARACTERISTIC_INTERFACE
    capabilities: frozenset = frozenset()
    framework_attrs = GattEntity.framework_attrs + (
        "value",
        "service_path",
        "capabilities",
        "read_value",
        "write_value",
        "start_notify",
        "stop_notify",
        "notify",
        "Flags",
        "Service",
        "Value",
        "ReadValue",
        "WriteValue",
        "StartNotify",
        "StopNotify",
    )

    def __init__(self) -> None:
        super().__init__()
        self.value = b""
        self.service_path: str | None = None

    @dbus_property(access=PropertyAccess.READ)
    def UUID(self) -> "s":
        return self.gatt_args.uuid

    @dbus_property(access=PropertyAccess.READ)
    def Flags(self) -> "as":
        return list(self.gatt_args.flags)

    @dbus_property(access=PropertyAccess.READ)
    def Service(self) -> "o":
        return self.service_path or ROOT_PATH

    @dbus_property(access=PropertyAccess.READ)
    def Value(self) -> "ay":
        return self.value

    async def register(self, bus: Bus, service_path: str) -> bool:
        path = self._begin_registration(service_path)
        LOGGER.info("Registering characteristic %s at %s", type(self).__name__, path)
        self.service_path = service_path
        return await self._publish(bus)


class ReadHooks:
    async def read_value(self, options: dict | None = None) -> bytes:
        LOGGER.debug("ReadValue on %s", self.path)
        return _as_bytes(await _call_handler(self.read), f"{type(self).__name__}.read()")

    @method()
    async def ReadValue(self, options: "a{sv}") -> "ay":
        return await self.read_value(options)


class WriteHooks:
    async def write_value(self, value: bytes, options: dict | None = None) -> None:
        data = _as_bytes(value, f"{type(self).__name__}.write_value()")
        LOGGER.debug("WriteValue on %s (%d bytes)", self.path, len(data))
        await _call_handler(self.write, data)

    @method()
    async def WriteValue(self, value: "ay", options: "a{sv}"):
        await self.write_value(value, options)


class NotifyHooks:
    def start_notify(self) -> None:
        LOGGER.debug("Notifications started on %s", self.path)

    def stop_notify(self) -> None:
        LOGGER.debug("Notifications stopped on %s", self.path)

    async def notify(self, value: bytes) -> None:
        """Store ``value`` and signal the change; dropped until the object is registered."""
        self.value = _as_bytes(value, f"{type(self).__name__}.notify()")
        if self.bus is None:
            LOGGER.debug("%s is not registered, dropping notification", type(self).__name__)
            return
        await self.bus.emit_property_changed(self.path, "Value")

    @method()
    def StartNotify(self):
        self.start_notify()

    @method()
    def StopNotify(self):
        self.stop_notify()


_HOOKS = (
    (Capability.READ, ReadHooks, "read"),
    (Capability.WRITE, WriteHooks, "write"),
    (Capability.NOTIFY, NotifyHooks, None),
)


def build_characteristic_class(user_cls: type, declared: CharacteristicArgs) -> type:
    capabilities = select_capabilities(declared.flags)

    bases = []
    for capability, hooks, handler in _HOOKS:
        if capability not in capabilities:
            continue
        if handler is not None and not callable(getattr(user_cls, handler, None)):
            raise MissingHandlerError(
                f"{user_cls.__name__} declares the {capability.value} flag but does not define {handler}()"
            )
        bases.append(hooks)

    return build_entity_class(
        user_cls,
        tuple(bases),
        GattCharacteristic,
        {"gatt_args": declared, "capabilities": capabilities},
    )


def gatt_characteristic(args: str | None = None, /, **kwargs: Any) -> Callable[[type], type]:
    """Declare a GATT characteristic.

    Accepts annotation text (``'uuid = "2a19", flags = ["read"]'``) or the same
    arguments as keywords. The decorated class becomes a ``GattCharacteristic``
    exposing ``ReadValue``/``WriteValue``/``StartNotify``/``StopNotify`` only
    for the declared flags.
    """
    declared = parse_characteristic_args(declaration_source(args, kwargs))

    def decorate(user_cls: type) -> type:
        return build_characteristic_class(user_cls, declared)

    return decorate
