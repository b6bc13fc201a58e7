"""Parsing and validation of service/characteristic annotation arguments."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from gattdecl.core.errors import ArgumentSyntaxError, SchemaError
from gattdecl.core.model import (
    CHARACTERISTIC_ARGS,
    SERVICE_ARGS,
    ArgExpression,
    ArgType,
    ArgValue,
    CharacteristicArgs,
    ServiceArgs,
)

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    | (?P<string>"(?:[^"\\]|\\.)*")
    | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<number>-?[0-9][0-9_]*(?:\.[0-9_]+)?)
    | (?P<punct>[=,\[\]])
    """,
    re.VERBOSE | re.DOTALL,
)
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_ESCAPES = {"\\": "\\", '"': '"', "n": "\n", "t": "\t", "r": "\r", "0": "\0"}
_BOOL_LITERALS = {"true": True, "false": False}

_NOT_AN_EXPRESSION = "Arguments must be expressions (ex: primary = false)"
_NOT_SEPARATED = "Args must be comma separated"
_BAD_RIGHT_SIDE = "Right side of expression must be string literal, boolean value or array of strings"
_BAD_ARRAY_ELEMENT = "Array elements must be string literals"

ArgSource = str | Mapping[str, Any]


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    offset: int


def _tokenize(source: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(source):
        match = _TOKEN_RE.match(source, pos)
        if match is None:
            if source[pos] == '"':
                raise ArgumentSyntaxError("Unterminated string literal", offset=pos)
            raise ArgumentSyntaxError(f"Unexpected character {source[pos]!r}", offset=pos)
        kind = match.lastgroup or ""
        if kind != "ws":
            tokens.append(_Token(kind=kind, text=match.group(), offset=pos))
        pos = match.end()
    return tokens


def _decode_string(token: _Token) -> str:
    def _replace(match: re.Match[str]) -> str:
        escaped = match.group(1)
        if escaped not in _ESCAPES:
            raise ArgumentSyntaxError(
                f"Unknown escape sequence \\{escaped}",
                offset=token.offset + match.start(),
            )
        return _ESCAPES[escaped]

    return _ESCAPE_RE.sub(_replace, token.text[1:-1])


class _ExpressionReader:
    def __init__(self, source: str) -> None:
        self._source = source
        self._tokens = _tokenize(source)
        self._pos = 0

    def _peek(self) -> _Token | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _next(self) -> _Token | None:
        token = self._peek()
        if token is not None:
            self._pos += 1
        return token

    def _end_offset(self) -> int:
        return len(self._source)

    def _is_punct(self, token: _Token | None, char: str) -> bool:
        return token is not None and token.kind == "punct" and token.text == char

    def read_all(self) -> list[ArgExpression]:
        expressions: list[ArgExpression] = []
        while self._peek() is not None:
            expressions.append(self._read_expression())
            token = self._next()
            if token is None:
                break
            if not self._is_punct(token, ","):
                raise ArgumentSyntaxError(_NOT_SEPARATED, offset=token.offset)
        return expressions

    def _read_expression(self) -> ArgExpression:
        name = self._next()
        if name is None or name.kind != "ident":
            raise ArgumentSyntaxError(
                _NOT_AN_EXPRESSION,
                offset=name.offset if name else self._end_offset(),
            )
        equals = self._next()
        if not self._is_punct(equals, "="):
            if equals is not None and (equals.kind == "ident" or self._is_punct(equals, "[")):
                raise ArgumentSyntaxError(_NOT_SEPARATED, offset=equals.offset)
            raise ArgumentSyntaxError(
                _NOT_AN_EXPRESSION,
                offset=equals.offset if equals else self._end_offset(),
            )
        return ArgExpression(name=name.text, value=self._read_value(), offset=name.offset)

    def _read_value(self) -> ArgValue:
        token = self._next()
        if token is None:
            raise ArgumentSyntaxError(_BAD_RIGHT_SIDE, offset=self._end_offset())
        if token.kind == "string":
            return ArgValue(ArgType.STR, _decode_string(token))
        if token.kind == "ident" and token.text in _BOOL_LITERALS:
            return ArgValue(ArgType.BOOL, _BOOL_LITERALS[token.text])
        if self._is_punct(token, "["):
            return ArgValue(ArgType.STR_LIST, self._read_array(token))
        raise ArgumentSyntaxError(_BAD_RIGHT_SIDE, offset=token.offset)

    def _read_array(self, opening: _Token) -> tuple[str, ...]:
        items: list[str] = []
        while True:
            token = self._next()
            if token is None:
                raise ArgumentSyntaxError("Unclosed array", offset=opening.offset)
            if self._is_punct(token, "]"):
                return tuple(items)
            if token.kind != "string":
                raise ArgumentSyntaxError(_BAD_ARRAY_ELEMENT, offset=token.offset)
            items.append(_decode_string(token))

            separator = self._next()
            if separator is None:
                raise ArgumentSyntaxError("Unclosed array", offset=opening.offset)
            if self._is_punct(separator, "]"):
                return tuple(items)
            if not self._is_punct(separator, ","):
                raise ArgumentSyntaxError(_NOT_SEPARATED, offset=separator.offset)


def parse_expressions(source: str) -> list[ArgExpression]:
    """Split annotation text into `name = value` expressions without checking names."""
    return _ExpressionReader(source).read_all()


def _value_from_python(value: Any) -> ArgValue:
    if isinstance(value, bool):
        return ArgValue(ArgType.BOOL, value)
    if isinstance(value, str):
        return ArgValue(ArgType.STR, value)
    if isinstance(value, (list, tuple)):
        if not all(isinstance(item, str) for item in value):
            raise ArgumentSyntaxError(_BAD_ARRAY_ELEMENT)
        return ArgValue(ArgType.STR_LIST, tuple(value))
    raise ArgumentSyntaxError(_BAD_RIGHT_SIDE)


def expressions_from_mapping(args: Mapping[str, Any]) -> list[ArgExpression]:
    """Keyword-argument counterpart of :func:`parse_expressions`."""
    return [ArgExpression(name=str(name), value=_value_from_python(value)) for name, value in args.items()]


def validate_args(
    expressions: list[ArgExpression],
    recognized: Mapping[str, ArgValue],
) -> dict[str, ArgValue]:
    values: dict[str, ArgValue] = {}
    for expr in expressions:
        expected = recognized.get(expr.name)
        if expected is None:
            raise SchemaError(f"Unknown arg {expr.name}", offset=expr.offset)
        if expr.value.type is not expected.type:
            raise SchemaError(
                f"Arg {expr.name} must be of type {expected.type.value}",
                offset=expr.offset,
            )
        values[expr.name] = expr.value
    return values


def parse_args(source: ArgSource, recognized: Mapping[str, ArgValue]) -> dict[str, ArgValue]:
    if isinstance(source, str):
        expressions = parse_expressions(source)
    else:
        expressions = expressions_from_mapping(source)
    return validate_args(expressions, recognized)


def _literal(values: Mapping[str, ArgValue], key: str) -> Any:
    arg = values.get(key)
    return arg.value if arg is not None else None


def parse_service_args(source: ArgSource) -> ServiceArgs:
    values = parse_args(source, SERVICE_ARGS)
    uuid = _literal(values, "uuid")
    if uuid is None:
        raise SchemaError("uuid must be defined")
    primary = _literal(values, "primary")
    return ServiceArgs(
        uuid=uuid,
        path=_literal(values, "path"),
        primary=True if primary is None else primary,
    )


def parse_characteristic_args(source: ArgSource) -> CharacteristicArgs:
    values = parse_args(source, CHARACTERISTIC_ARGS)
    uuid = _literal(values, "uuid")
    if uuid is None:
        raise SchemaError("uuid must be defined")
    return CharacteristicArgs(
        uuid=uuid,
        flags=_literal(values, "flags") or (),
        service=_literal(values, "service"),
        path=_literal(values, "path"),
    )
