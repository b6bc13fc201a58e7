"""Object path resolution for generated entities."""

from __future__ import annotations

import logging

from dbus_fast.validators import is_object_path_valid

ROOT_PATH = "/"
LOGGER = logging.getLogger(__name__)


def join_path(parent_path: str, name: str) -> str:
    if parent_path == ROOT_PATH:
        return f"{ROOT_PATH}{name}"
    return f"{parent_path}/{name}"


def resolve_path(override: str | None, parent_path: str, type_name: str) -> str:
    """Return ``override`` when it is a valid absolute object path, else ``parent_path/type_name``."""
    if override is not None:
        if is_object_path_valid(override):
            return override
        LOGGER.warning(
            "Ignoring invalid path override %r for %s; deriving from %s",
            override,
            type_name,
            parent_path,
        )
    return join_path(parent_path, type_name)
