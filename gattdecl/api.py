"""Stable public API for declaring and registering GATT objects.

This module is the supported integration surface for applications. Avoid
importing from internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from gattdecl.bus.base import Bus
from gattdecl.bus.dbus import DBusBus
from gattdecl.core.arg_parser import parse_characteristic_args, parse_service_args
from gattdecl.core.capabilities import interface_methods, select_capabilities
from gattdecl.core.declaration_loader import (
    CharacteristicPlan,
    LoadedDeclarations,
    ServicePlan,
    load_declarations,
)
from gattdecl.core.errors import (
    ArgumentSyntaxError,
    BusError,
    CapabilityError,
    DeclarationLoadError,
    DeclarationValidationError,
    DefinitionError,
    FieldConflictError,
    GattdeclError,
    MissingHandlerError,
    PublishError,
    RegistrationError,
    SchemaError,
    SignalError,
)
from gattdecl.core.model import (
    ArgType,
    ArgValue,
    Capability,
    CharacteristicArgs,
    RegistrationState,
    ServiceArgs,
)
from gattdecl.gatt.application import RegistrationFailure, RegistrationReport, register_services
from gattdecl.gatt.characteristic import GattCharacteristic, gatt_characteristic
from gattdecl.gatt.service import GattService, gatt_service

__all__ = [
    "GattdeclError",
    "DefinitionError",
    "ArgumentSyntaxError",
    "SchemaError",
    "CapabilityError",
    "FieldConflictError",
    "MissingHandlerError",
    "RegistrationError",
    "BusError",
    "PublishError",
    "SignalError",
    "DeclarationLoadError",
    "DeclarationValidationError",
    "ArgType",
    "ArgValue",
    "Capability",
    "CharacteristicArgs",
    "RegistrationState",
    "ServiceArgs",
    "Bus",
    "DBusBus",
    "GattCharacteristic",
    "GattService",
    "gatt_characteristic",
    "gatt_service",
    "parse_characteristic_args",
    "parse_service_args",
    "select_capabilities",
    "interface_methods",
    "register_services",
    "RegistrationFailure",
    "RegistrationReport",
    "CharacteristicPlan",
    "LoadedDeclarations",
    "ServicePlan",
    "load_declarations",
]
