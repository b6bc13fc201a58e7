"""Registration of independent service trees."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from gattdecl.bus.base import Bus
from gattdecl.core.errors import GattdeclError
from gattdecl.gatt.service import GattService

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrationFailure:
    service: str
    error: GattdeclError


@dataclass(frozen=True)
class RegistrationReport:
    registered: tuple[str, ...]
    failures: tuple[RegistrationFailure, ...]

    @property
    def ok(self) -> bool:
        return not self.failures


async def register_services(
    bus: Bus,
    services: Iterable[GattService],
    base_path: str = "/",
) -> RegistrationReport:
    """Register each service tree as its own task.

    Trees occupy disjoint paths, so they run concurrently; a failing tree is
    reported without affecting the others.
    """
    services = list(services)
    results = await asyncio.gather(
        *(service.register(bus, base_path) for service in services),
        return_exceptions=True,
    )

    registered: list[str] = []
    failures: list[RegistrationFailure] = []
    for service, result in zip(services, results):
        name = type(service).__name__
        if isinstance(result, GattdeclError):
            LOGGER.warning("Registration of %s failed: %s", name, result)
            failures.append(RegistrationFailure(service=name, error=result))
        elif isinstance(result, BaseException):
            raise result
        else:
            registered.append(service.path or "")
    return RegistrationReport(registered=tuple(registered), failures=tuple(failures))
