"""org.bluez.GattService1 objects generated from service declarations.

Signature strings stay live annotations here, see ``gattdecl.gatt.characteristic``.
"""

import logging
from collections.abc import Callable
from typing import Any

from dbus_fast.constants import PropertyAccess
from dbus_fast.service import dbus_property

from gattdecl.bus.base import Bus
from gattdecl.core.arg_parser import parse_service_args
from gattdecl.core.errors import RegistrationError
from gattdecl.core.model import ServiceArgs
from gattdecl.gatt.characteristic import GattCharacteristic
from gattdecl.gatt.entity import GattEntity, build_entity_class, declaration_source

SERVICE_INTERFACE = "org.bluez.GattService1"
LOGGER = logging.getLogger(__name__)


class GattService(GattEntity):
    interface_name = SERVICE_INTERFACE
    framework_attrs = GattEntity.framework_attrs + (
        "characteristic_paths",
        "Primary",
        "Characteristics",
    )

    def __init__(self) -> None:
        super().__init__()
        self.characteristic_paths: tuple = ()

    @dbus_property(access=PropertyAccess.READ)
    def UUID(self) -> "s":
        return self.gatt_args.uuid

    @dbus_property(access=PropertyAccess.READ)
    def Primary(self) -> "b":
        return self.gatt_args.primary

    @dbus_property(access=PropertyAccess.READ)
    def Characteristics(self) -> "ao":
        return list(self.characteristic_paths)

    def get_characteristics(self) -> list[GattCharacteristic]:
        """Characteristics registered under this service; override to declare children."""
        return []

    async def register(self, bus: Bus, base_path: str) -> bool:
        """Register every characteristic, in order, then publish the service itself.

        The first failing child aborts the rest of this tree.
        """
        path = self._begin_registration(base_path)
        LOGGER.info("Registering service %s at %s", type(self).__name__, path)

        paths = []
        for characteristic in self.get_characteristics():
            if not isinstance(characteristic, GattCharacteristic):
                raise RegistrationError(
                    f"{type(self).__name__}.get_characteristics() returned {characteristic!r}, "
                    "which is not a declared characteristic"
                )
            await characteristic.register(bus, path)
            paths.append(characteristic.path)
        self.characteristic_paths = tuple(paths)

        return await self._publish(bus)


def build_service_class(user_cls: type, declared: ServiceArgs) -> type:
    return build_entity_class(user_cls, (), GattService, {"gatt_args": declared})


def gatt_service(args: str | None = None, /, **kwargs: Any) -> Callable[[type], type]:
    """Declare a GATT service from annotation text or keyword arguments."""
    declared = parse_service_args(declaration_source(args, kwargs))

    def decorate(user_cls: type) -> type:
        return build_service_class(user_cls, declared)

    return decorate
