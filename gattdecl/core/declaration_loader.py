"""Loading and validation of YAML service-tree declaration files."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from gattdecl.core.arg_parser import parse_characteristic_args, parse_service_args
from gattdecl.core.capabilities import interface_methods, select_capabilities
from gattdecl.core.errors import (
    DeclarationLoadError,
    DeclarationValidationError,
    DefinitionError,
)
from gattdecl.core.model import Capability, CharacteristicArgs, ServiceArgs
from gattdecl.core.paths import ROOT_PATH, resolve_path

LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys.

    Unquoted numbers stay strings, so ``uuid: 1800`` reads as ``"1800"``.
    """


_NUMERIC_TAGS = {"tag:yaml.org,2002:int", "tag:yaml.org,2002:float"}

UniqueKeyLoader.yaml_implicit_resolvers = {
    first_char: [(tag, regexp) for tag, regexp in mappings if tag not in _NUMERIC_TAGS]
    for first_char, mappings in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise DeclarationValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class CharacteristicPlan:
    name: str
    args: CharacteristicArgs
    path: str
    capabilities: frozenset[Capability]
    methods: tuple[str, ...]


@dataclass(frozen=True)
class ServicePlan:
    name: str
    args: ServiceArgs
    path: str
    characteristics: tuple[CharacteristicPlan, ...]


@dataclass(frozen=True)
class LoadedDeclarations:
    source: str
    base_path: str
    services: tuple[ServicePlan, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("gattdecl.schemas").joinpath("declaration.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DeclarationLoadError(f"Could not read declaration file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise DeclarationValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise DeclarationValidationError(f"Declaration file {path} must contain a mapping at root")
    return loaded


def _plan_characteristic(doc: dict[str, Any], service_path: str, context: str) -> CharacteristicPlan:
    name = doc["name"]
    try:
        args = parse_characteristic_args(doc["args"])
        capabilities = select_capabilities(args.flags)
    except DefinitionError as exc:
        raise DeclarationValidationError(f"{context}.{name}: {exc}") from exc
    return CharacteristicPlan(
        name=name,
        args=args,
        path=resolve_path(args.path, service_path, name),
        capabilities=capabilities,
        methods=interface_methods(capabilities),
    )


def _plan_service(doc: dict[str, Any], base_path: str, source: str) -> ServicePlan:
    name = doc["name"]
    try:
        args = parse_service_args(doc["args"])
    except DefinitionError as exc:
        raise DeclarationValidationError(f"{source}: {name}: {exc}") from exc
    path = resolve_path(args.path, base_path, name)
    characteristics = tuple(
        _plan_characteristic(chrc, path, f"{source}: {name}")
        for chrc in doc.get("characteristics", [])
    )
    return ServicePlan(name=name, args=args, path=path, characteristics=characteristics)


def _check_unique_paths(services: tuple[ServicePlan, ...], source: str) -> None:
    seen: dict[str, str] = {}
    for service in services:
        entries = [(service.path, service.name)]
        entries.extend((chrc.path, f"{service.name}.{chrc.name}") for chrc in service.characteristics)
        for path, owner in entries:
            if path in seen:
                raise DeclarationValidationError(
                    f"{source}: {owner} and {seen[path]} both resolve to {path}"
                )
            seen[path] = owner


def build_declarations(doc: dict[str, Any], source: str, base_path: str | None = None) -> LoadedDeclarations:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise DeclarationValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    root = base_path or doc.get("base_path") or ROOT_PATH
    services = tuple(_plan_service(service, root, source) for service in doc["services"])
    _check_unique_paths(services, source)
    LOGGER.debug("Loaded %d service(s) from %s", len(services), source)
    return LoadedDeclarations(source=source, base_path=root, services=services)


def load_declarations(path: Path, base_path: str | None = None) -> LoadedDeclarations:
    """Read, validate and plan a declaration file.

    ``base_path`` overrides the file's own ``base_path`` entry.
    """
    return build_declarations(_read_yaml(path), str(path), base_path=base_path)
