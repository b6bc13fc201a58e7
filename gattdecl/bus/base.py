"""Bus collaborator interface."""

from __future__ import annotations

from typing import Any, Protocol


class Bus(Protocol):
    async def publish(self, path: str, entity: Any) -> bool:
        """Expose an entity at an absolute object path.

        Raises ``PublishError`` when the path is occupied or otherwise rejected.
        """

    async def emit_property_changed(self, path: str, prop: str) -> None:
        """Signal that property ``prop`` of the entity at ``path`` changed."""
