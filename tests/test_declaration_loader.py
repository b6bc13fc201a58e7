from __future__ import annotations

from pathlib import Path

import pytest

from gattdecl.core.declaration_loader import load_declarations
from gattdecl.core.errors import DeclarationLoadError, DeclarationValidationError
from gattdecl.core.model import Capability


def _write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_load_tree_with_text_and_mapping_args(tmp_path: Path) -> None:
    source = _write(
        tmp_path / "battery.yaml",
        """
base_path: /org/example
services:
  - name: Battery
    args: 'uuid = "180f"'
    characteristics:
      - name: BatteryLevel
        args:
          uuid: "2a19"
          flags: [read, notify]
      - name: Control
        args: 'uuid = "2a1b", flags = ["write-without-response"], path = "/org/example/ctl"'
  - name: DeviceInformation
    args:
      uuid: "180a"
      primary: false
""",
    )

    loaded = load_declarations(source)
    assert loaded.base_path == "/org/example"
    battery, info = loaded.services

    assert battery.path == "/org/example/Battery"
    assert battery.args.primary is True
    level, control = battery.characteristics
    assert level.path == "/org/example/Battery/BatteryLevel"
    assert level.capabilities == frozenset({Capability.READ, Capability.NOTIFY})
    assert level.methods == ("ReadValue", "StartNotify", "StopNotify")
    assert control.path == "/org/example/ctl"
    assert control.methods == ("WriteValue",)

    assert info.path == "/org/example/DeviceInformation"
    assert info.args.primary is False
    assert info.characteristics == ()


def test_base_path_defaults_to_root_and_can_be_overridden(tmp_path: Path) -> None:
    source = _write(
        tmp_path / "svc.yaml",
        """
services:
  - name: Battery
    args: 'uuid = "180f"'
""",
    )
    assert load_declarations(source).services[0].path == "/Battery"
    assert load_declarations(source, base_path="/app").services[0].path == "/app/Battery"


def test_bogus_flag_rejected(tmp_path: Path) -> None:
    source = _write(
        tmp_path / "bogus.yaml",
        """
services:
  - name: Battery
    args: 'uuid = "180f"'
    characteristics:
      - name: Level
        args: 'uuid = "2a19", flags = ["bogus"]'
""",
    )
    with pytest.raises(DeclarationValidationError, match='Invalid characteristic flag "bogus"'):
        load_declarations(source)


def test_bad_annotation_text_rejected(tmp_path: Path) -> None:
    source = _write(
        tmp_path / "bad.yaml",
        """
services:
  - name: Battery
    args: 'primary = true'
""",
    )
    with pytest.raises(DeclarationValidationError, match="Battery: uuid must be defined"):
        load_declarations(source)


def test_schema_violation_rejected(tmp_path: Path) -> None:
    source = _write(
        tmp_path / "schema.yaml",
        """
services:
  - name: Battery
    args: 'uuid = "180f"'
    descriptors: []
""",
    )
    with pytest.raises(DeclarationValidationError, match="Schema validation failed"):
        load_declarations(source)


def test_invalid_entity_name_rejected(tmp_path: Path) -> None:
    source = _write(
        tmp_path / "name.yaml",
        """
services:
  - name: battery-service
    args: 'uuid = "180f"'
""",
    )
    with pytest.raises(DeclarationValidationError, match=r"services\.0\.name"):
        load_declarations(source)


def test_duplicate_yaml_keys_rejected(tmp_path: Path) -> None:
    source = _write(
        tmp_path / "dup.yaml",
        """
services:
  - name: Battery
    name: Other
    args: 'uuid = "180f"'
""",
    )
    with pytest.raises(DeclarationValidationError, match="Duplicate key 'name'"):
        load_declarations(source)


def test_colliding_paths_rejected(tmp_path: Path) -> None:
    source = _write(
        tmp_path / "collide.yaml",
        """
services:
  - name: Battery
    args: 'uuid = "180f"'
  - name: Other
    args: 'uuid = "180a", path = "/Battery"'
""",
    )
    with pytest.raises(DeclarationValidationError, match="both resolve to /Battery"):
        load_declarations(source)


def test_root_must_be_mapping(tmp_path: Path) -> None:
    source = _write(tmp_path / "list.yaml", "- a\n- b\n")
    with pytest.raises(DeclarationValidationError, match="mapping at root"):
        load_declarations(source)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(DeclarationLoadError):
        load_declarations(tmp_path / "missing.yaml")


def test_unquoted_numeric_uuid_stays_text(tmp_path: Path) -> None:
    source = _write(
        tmp_path / "numeric.yaml",
        """
services:
  - name: GenericAccess
    args:
      uuid: 1800
      primary: false
    characteristics:
      - name: DeviceName
        args:
          uuid: 2a00
          flags: [read]
      - name: Appearance
        args:
          uuid: 0x2a01
""",
    )
    service = load_declarations(source).services[0]
    assert service.args.uuid == "1800"
    assert service.args.primary is False
    assert [chrc.args.uuid for chrc in service.characteristics] == ["2a00", "0x2a01"]
