from __future__ import annotations

import pytest

from gattdecl.core.arg_parser import (
    parse_args,
    parse_characteristic_args,
    parse_expressions,
    parse_service_args,
)
from gattdecl.core.errors import ArgumentSyntaxError, SchemaError
from gattdecl.core.model import SERVICE_ARGS, ArgType, ArgValue, CharacteristicArgs, ServiceArgs


def test_service_args_defaults() -> None:
    args = parse_service_args('uuid = "0000180f-0000-1000-8000-00805f9b34fb"')
    assert args == ServiceArgs(uuid="0000180f-0000-1000-8000-00805f9b34fb", path=None, primary=True)


def test_service_args_all_keys() -> None:
    args = parse_service_args('uuid = "180f", path = "/org/example/battery", primary = false,')
    assert args.uuid == "180f"
    assert args.path == "/org/example/battery"
    assert args.primary is False


def test_characteristic_args_all_keys() -> None:
    args = parse_characteristic_args(
        'uuid = "2a19", flags = ["read", "notify"], service = "Battery", path = "/x/level"'
    )
    assert args == CharacteristicArgs(
        uuid="2a19",
        flags=("read", "notify"),
        service="Battery",
        path="/x/level",
    )


def test_characteristic_flags_default_empty() -> None:
    assert parse_characteristic_args('uuid = "2a19"').flags == ()


def test_keyword_form_matches_text_form() -> None:
    text = parse_characteristic_args('uuid = "2a19", flags = ["read", "write"]')
    keywords = parse_characteristic_args({"uuid": "2a19", "flags": ["read", "write"]})
    assert text == keywords


@pytest.mark.parametrize(
    "source",
    ['path = "/a"', "primary = true", "", {"primary": False}],
)
def test_missing_uuid_rejected(source) -> None:
    with pytest.raises(SchemaError, match="uuid must be defined"):
        parse_service_args(source)


def test_unknown_arg_rejected() -> None:
    with pytest.raises(SchemaError, match="Unknown arg color"):
        parse_service_args('uuid = "180f", color = "red"')


def test_flags_is_not_a_service_arg() -> None:
    with pytest.raises(SchemaError, match="Unknown arg flags"):
        parse_service_args('uuid = "180f", flags = ["read"]')


@pytest.mark.parametrize(
    ("source", "message"),
    [
        ('uuid = "2a19", flags = "read"', "Arg flags must be of type list[str]"),
        ("uuid = true", "Arg uuid must be of type str"),
        ('uuid = "2a19", service = ["a"]', "Arg service must be of type str"),
    ],
)
def test_characteristic_type_mismatch(source: str, message: str) -> None:
    with pytest.raises(SchemaError) as exc:
        parse_characteristic_args(source)
    assert exc.value.message == message


def test_primary_must_be_bool() -> None:
    with pytest.raises(SchemaError, match="Arg primary must be of type bool"):
        parse_service_args('uuid = "180f", primary = "yes"')


def test_keyword_type_mismatch() -> None:
    with pytest.raises(SchemaError, match="Arg flags must be of type list"):
        parse_characteristic_args({"uuid": "2a19", "flags": "read"})


def test_duplicate_key_last_wins() -> None:
    args = parse_service_args('uuid = "180f", uuid = "180a", primary = true, primary = false')
    assert args.uuid == "180a"
    assert args.primary is False


def test_parse_args_only_returns_supplied_keys() -> None:
    values = parse_args('uuid = "180f"', SERVICE_ARGS)
    assert values == {"uuid": ArgValue(ArgType.STR, "180f")}


def test_string_escapes_are_decoded() -> None:
    expressions = parse_expressions(r'uuid = "a\"b\\c\n"')
    assert expressions[0].value.value == 'a"b\\c\n'


def test_expression_offsets_point_at_names() -> None:
    expressions = parse_expressions('uuid = "180f",  primary = true')
    assert [expr.offset for expr in expressions] == [0, 16]


@pytest.mark.parametrize(
    ("source", "message"),
    [
        ('"180f"', "Arguments must be expressions (ex: primary = false)"),
        ("uuid", "Arguments must be expressions (ex: primary = false)"),
        ('uuid = "180f" primary = true', "Args must be comma separated"),
        ('uuid = "a", flags = ["read" "write"]', "Args must be comma separated"),
        ("uuid = 5", "Right side of expression must be string literal, boolean value or array of strings"),
        ("uuid = other", "Right side of expression must be string literal, boolean value or array of strings"),
        ("uuid =", "Right side of expression must be string literal, boolean value or array of strings"),
        ('flags = ["read", true]', "Array elements must be string literals"),
        ('flags = ["read"', "Unclosed array"),
        ('uuid = "180f', "Unterminated string literal"),
        (r'uuid = "\q"', "Unknown escape sequence \\q"),
        ("uuid = @", "Unexpected character '@'"),
    ],
)
def test_grammar_errors(source: str, message: str) -> None:
    with pytest.raises(ArgumentSyntaxError) as exc:
        parse_expressions(source)
    assert exc.value.message == message


def test_grammar_error_reports_column() -> None:
    with pytest.raises(ArgumentSyntaxError) as exc:
        parse_expressions('uuid = "180f", primary = 1')
    assert exc.value.offset == 25
    assert str(exc.value).endswith("(at column 26)")


def test_keyword_list_with_non_strings_rejected() -> None:
    with pytest.raises(ArgumentSyntaxError, match="Array elements must be string literals"):
        parse_characteristic_args({"uuid": "2a19", "flags": ["read", 1]})


def test_keyword_unsupported_value_rejected() -> None:
    with pytest.raises(ArgumentSyntaxError, match="Right side of expression"):
        parse_service_args({"uuid": 0x180F})


def test_trailing_comma_in_array_accepted() -> None:
    args = parse_characteristic_args('uuid = "2a19", flags = ["read", "write",],')
    assert args.flags == ("read", "write")
