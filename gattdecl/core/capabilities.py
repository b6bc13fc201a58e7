"""Flag-driven selection of the hooks a characteristic exposes."""

from __future__ import annotations

from collections.abc import Iterable

from gattdecl.core.errors import CapabilityError
from gattdecl.core.model import Capability

# Matching is by substring, so e.g. "encrypt-read" selects READ. First match wins.
_MATCH_ORDER = (Capability.READ, Capability.WRITE, Capability.NOTIFY)

_INTERFACE_METHODS: dict[Capability, tuple[str, ...]] = {
    Capability.READ: ("ReadValue",),
    Capability.WRITE: ("WriteValue",),
    Capability.NOTIFY: ("StartNotify", "StopNotify"),
}


def capability_for_flag(flag: str) -> Capability:
    for capability in _MATCH_ORDER:
        if capability.value in flag:
            return capability
    raise CapabilityError(f'Invalid characteristic flag "{flag}"')


def select_capabilities(flags: Iterable[str]) -> frozenset[Capability]:
    return frozenset(capability_for_flag(flag) for flag in flags)


def interface_methods(capabilities: Iterable[Capability]) -> tuple[str, ...]:
    """D-Bus method names exposed for a capability set, in interface order."""
    selected = set(capabilities)
    methods: list[str] = []
    for capability in _MATCH_ORDER:
        if capability in selected:
            methods.extend(_INTERFACE_METHODS[capability])
    return tuple(methods)
