from __future__ import annotations

import pytest

from gattdecl.core.errors import PublishError


class FakeBus:
    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.reject: set[str] = set()

    async def publish(self, path: str, entity: object) -> bool:
        self.calls.append(("publish", path))
        if path in self.reject:
            raise PublishError(f"Object path {path} is already occupied")
        return True

    async def emit_property_changed(self, path: str, prop: str) -> None:
        self.calls.append(("emit", path, prop))


@pytest.fixture
def bus() -> FakeBus:
    return FakeBus()
