"""Declarative BlueZ GATT services and characteristics on D-Bus."""

from gattdecl.gatt.characteristic import gatt_characteristic
from gattdecl.gatt.service import gatt_service

__version__ = "0.1.0"

__all__ = ["gatt_characteristic", "gatt_service", "__version__"]
