"""dbus-fast implementation of the bus collaborator.

``MessageBus.export`` announces each object through dbus-fast's built-in
``org.freedesktop.DBus.ObjectManager``, which also answers the
``GetManagedObjects`` call BlueZ makes on ``RegisterApplication``.
"""

import logging
from typing import Any

from dbus_fast import BusType
from dbus_fast.aio import MessageBus
from dbus_fast.errors import DBusError, InvalidObjectPathError

from gattdecl.core.errors import BusError, PublishError, SignalError
from gattdecl.gatt.entity import GattEntity

BLUEZ_SERVICE = "org.bluez"
GATT_MANAGER_INTERFACE = "org.bluez.GattManager1"
LOGGER = logging.getLogger(__name__)


class DBusBus:
    def __init__(self, message_bus: MessageBus) -> None:
        self.message_bus = message_bus
        self._objects: dict[str, GattEntity] = {}

    @classmethod
    async def connect(cls, bus_type: BusType = BusType.SYSTEM) -> "DBusBus":
        try:
            message_bus = await MessageBus(bus_type=bus_type).connect()
        except (OSError, DBusError) as exc:
            raise BusError(f"Could not connect to the D-Bus {bus_type.name.lower()} bus: {exc}") from exc
        return cls(message_bus)

    def disconnect(self) -> None:
        self.message_bus.disconnect()

    async def publish(self, path: str, entity: GattEntity) -> bool:
        if path in self._objects:
            raise PublishError(f"Object path {path} is already occupied")
        try:
            self.message_bus.export(path, entity)
        except (ValueError, InvalidObjectPathError) as exc:
            raise PublishError(f"Could not export {type(entity).__name__} at {path}: {exc}") from exc

        self._objects[path] = entity
        LOGGER.debug("Exported %s at %s", entity.name, path)
        return True

    async def emit_property_changed(self, path: str, prop: str) -> None:
        entity = self._objects.get(path)
        if entity is None:
            raise SignalError(f"No object published at {path}")
        if not entity.has_gatt_property(prop):
            raise SignalError(f"{entity.name} at {path} has no property {prop}")
        entity.emit_properties_changed({prop: getattr(entity, prop)})

    async def _gatt_manager(self, adapter_path: str) -> Any:
        try:
            introspection = await self.message_bus.introspect(BLUEZ_SERVICE, adapter_path)
        except DBusError as exc:
            raise BusError(f"BlueZ adapter {adapter_path} is not available: {exc}") from exc
        proxy = self.message_bus.get_proxy_object(BLUEZ_SERVICE, adapter_path, introspection)
        return proxy.get_interface(GATT_MANAGER_INTERFACE)

    async def register_application(self, adapter_path: str, app_path: str = "/") -> None:
        """Hand the published tree rooted at ``app_path`` to BlueZ on ``adapter_path``."""
        manager = await self._gatt_manager(adapter_path)
        try:
            await manager.call_register_application(app_path, {})
        except DBusError as exc:
            raise BusError(f"BlueZ refused application at {app_path}: {exc}") from exc
        LOGGER.info("Registered GATT application %s on %s", app_path, adapter_path)

    async def unregister_application(self, adapter_path: str, app_path: str = "/") -> None:
        manager = await self._gatt_manager(adapter_path)
        try:
            await manager.call_unregister_application(app_path)
        except DBusError as exc:
            raise BusError(f"BlueZ could not unregister application at {app_path}: {exc}") from exc
        LOGGER.info("Unregistered GATT application %s from %s", app_path, adapter_path)
