"""Shared plumbing for generated GATT services and characteristics."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from dbus_fast.service import ServiceInterface

from gattdecl.core.errors import FieldConflictError, PublishError, RegistrationError
from gattdecl.core.model import RegistrationState
from gattdecl.core.paths import resolve_path

if TYPE_CHECKING:
    from gattdecl.bus.base import Bus

LOGGER = logging.getLogger(__name__)


class GattEntity(ServiceInterface):
    """A D-Bus interface object that registers itself under a parent path.

    Subclasses are produced by the ``gatt_service``/``gatt_characteristic``
    decorators, which set ``gatt_args`` to the validated declaration.
    """

    interface_name = ""
    gatt_args: Any = None
    framework_attrs: tuple[str, ...] = (
        "name",
        "path",
        "bus",
        "registration_state",
        "gatt_args",
        "framework_attrs",
        "interface_name",
        "register",
        "get_path",
        "has_gatt_property",
        "UUID",
    )

    def __init__(self) -> None:
        super().__init__(self.interface_name)
        self.path: str | None = None
        self.bus: Bus | None = None
        self.registration_state = RegistrationState.UNREGISTERED

    def get_path(self, parent_path: str) -> str:
        return resolve_path(self.gatt_args.path, parent_path, type(self).__name__)

    def has_gatt_property(self, prop: str) -> bool:
        return isinstance(getattr(type(self), prop, None), property)

    def _begin_registration(self, parent_path: str) -> str:
        if self.registration_state is not RegistrationState.UNREGISTERED:
            raise RegistrationError(
                f"{type(self).__name__} cannot register twice (state: {self.registration_state.value})"
            )
        self.registration_state = RegistrationState.REGISTERING
        self.path = self.get_path(parent_path)
        return self.path

    async def _publish(self, bus: Bus) -> bool:
        if not await bus.publish(self.path or "", self):
            raise PublishError(f"Bus rejected {type(self).__name__} at {self.path}")
        self.bus = bus
        self.registration_state = RegistrationState.REGISTERED
        LOGGER.info("Published %s at %s", type(self).__name__, self.path)
        return True


def declaration_source(args: Any, kwargs: Mapping[str, Any]) -> str | Mapping[str, Any]:
    if args is None:
        return kwargs
    if not isinstance(args, str):
        raise TypeError("Declaration arguments must be annotation text or keyword arguments")
    if kwargs:
        raise TypeError("Pass either annotation text or keyword arguments, not both")
    return args


def _declared_names(user_cls: type) -> set[str]:
    names = {name for name in dir(user_cls) if not name.startswith("__")}
    for klass in user_cls.__mro__:
        names.update(getattr(klass, "__annotations__", {}))
    return names


def build_entity_class(
    user_cls: type,
    bases: tuple[type, ...],
    framework: type[GattEntity],
    attrs: Mapping[str, Any],
) -> type:
    """Create the runtime type for ``user_cls``.

    The generated class keeps the user's name, fields, methods and constructor
    and inherits the hooks in ``bases`` plus the ``framework`` base.
    """
    if not isinstance(user_cls, type):
        raise TypeError(f"GATT declarations decorate classes, got {user_cls!r}")

    conflicts = sorted(_declared_names(user_cls) & set(framework.framework_attrs))
    if conflicts:
        raise FieldConflictError(
            f"{user_cls.__name__} declares framework-owned attribute(s): {', '.join(conflicts)}"
        )

    user_init = user_cls.__init__

    def __init__(self: GattEntity, *args: Any, **kwargs: Any) -> None:
        framework.__init__(self)
        if user_init is not object.__init__:
            user_init(self, *args, **kwargs)
        elif args or kwargs:
            raise TypeError(f"{user_cls.__name__}() takes no arguments")

    namespace: dict[str, Any] = {
        "__module__": user_cls.__module__,
        "__qualname__": user_cls.__qualname__,
        "__doc__": user_cls.__doc__,
        "__init__": __init__,
        **attrs,
    }
    return type(user_cls.__name__, (user_cls, *bases, framework), namespace)
