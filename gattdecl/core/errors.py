"""Domain-specific errors for gattdecl."""

from __future__ import annotations


class GattdeclError(Exception):
    """Base error for gattdecl."""


class DefinitionError(GattdeclError):
    """Raised when a service or characteristic declaration cannot be turned into a type."""

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset

    def __str__(self) -> str:
        if self.offset is None:
            return self.message
        return f"{self.message} (at column {self.offset + 1})"


class ArgumentSyntaxError(DefinitionError):
    """Raised when annotation text is not a list of `name = value` expressions."""


class SchemaError(DefinitionError):
    """Raised on unknown arguments, mistyped values, or a missing uuid."""


class CapabilityError(DefinitionError):
    """Raised when a characteristic flag selects no known capability."""


class FieldConflictError(DefinitionError):
    """Raised when a declared class reuses a framework-owned attribute name."""


class MissingHandlerError(DefinitionError):
    """Raised when a selected capability has no user implementation."""


class RegistrationError(GattdeclError):
    """Raised when an entity cannot enter registration."""


class BusError(GattdeclError):
    """Base bus collaborator error."""


class PublishError(BusError):
    """Raised when the bus refuses to expose an object at a path."""


class SignalError(BusError):
    """Raised when a property-changed signal cannot be emitted."""


class DeclarationLoadError(GattdeclError):
    """Raised when reading a declaration file fails."""


class DeclarationValidationError(GattdeclError):
    """Raised when a declaration file does not conform to schema or semantics."""
