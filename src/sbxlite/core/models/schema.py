from __future__ import annotations

"""Declarative schema rules and validation outcomes."""

from dataclasses import dataclass, field as dataclass_field, replace
from enum import Enum
from typing import Callable, Optional, Tuple


class FieldKind(str, Enum):
    """Runtime kinds a configuration field can be declared with."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    ENUM = "enum"
    PORT = "port"
    HEX_STRING = "hex string"


class ValidationReason(str, Enum):
    """Stable reason codes for rejected configuration fragments."""

    MISSING_FIELD = "MissingField"
    INVALID_FIELD_TYPE = "InvalidFieldType"
    DEPRECATED_FIELD = "DeprecatedField"
    PORT_CONFLICT = "PortConflict"


@dataclass(frozen=True)
class FieldSpec:
    """Contract for one field of a configuration section.

    Attributes:
        name: Key inside the section object.
        kinds: Accepted kinds; more than one means "any of".
        required: Whether absence is a failure.
        choices: Allowed values for ENUM fields.
        item_kind: Kind every element must have, for ARRAY fields.
        non_empty: ARRAY fields must hold at least one element.
        rule: Nested rule applied to OBJECT values (or to each element when
            `item_kind` is OBJECT).
        min_version: Engine version from which the field is enforced.
        deprecated_since: Engine version from which the field is rejected.
        max_length: Upper bound for HEX_STRING lengths.
    """

    name: str
    kinds: Tuple[FieldKind, ...]
    required: bool = False
    choices: Tuple[str, ...] = ()
    item_kind: Optional[FieldKind] = None
    non_empty: bool = False
    rule: Optional["SchemaRule"] = None
    min_version: Optional[str] = None
    deprecated_since: Optional[str] = None
    max_length: Optional[int] = None

    @property
    def expected(self) -> str:
        """Human-readable description of the accepted kind."""
        if self.kinds == (FieldKind.ENUM,):
            return "one of: " + ", ".join(self.choices)
        if self.kinds == (FieldKind.PORT,):
            return "integer in range 1-65535"
        if self.kinds == (FieldKind.ARRAY,) and self.item_kind is not None:
            prefix = "non-empty array" if self.non_empty else "array"
            noun = "objects" if self.item_kind is FieldKind.OBJECT else f"{self.item_kind.value}s"
            return f"{prefix} of {noun}"
        return " or ".join(kind.value for kind in self.kinds)


@dataclass(frozen=True)
class SchemaRule:
    """Immutable description of one configuration section."""

    section: str
    fields: Tuple[FieldSpec, ...]
    deprecated: Tuple[FieldSpec, ...] = ()

    @property
    def required(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.fields if spec.required)

    @property
    def types(self) -> Tuple[Tuple[str, str], ...]:
        return tuple((spec.name, spec.expected) for spec in self.fields)

    def field(self, name: str) -> Optional[FieldSpec]:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of validating a configuration fragment: valid, or the first failure."""

    valid: bool
    reason: Optional[ValidationReason] = None
    field: Optional[str] = None
    expected: Optional[str] = None
    message: str = ""
    render_message: Optional[Callable[[str], str]] = dataclass_field(
        default=None, repr=False, compare=False
    )

    def __bool__(self) -> bool:
        return self.valid

    @classmethod
    def ok(cls) -> "ValidationOutcome":
        return cls(valid=True)

    @classmethod
    def _failure(
        cls,
        reason: ValidationReason,
        field_name: str,
        render_message: Callable[[str], str],
        expected: Optional[str] = None,
    ) -> "ValidationOutcome":
        return cls(
            valid=False,
            reason=reason,
            field=field_name,
            expected=expected,
            message=render_message(field_name),
            render_message=render_message,
        )

    @classmethod
    def missing(cls, field_name: str) -> "ValidationOutcome":
        return cls._failure(
            ValidationReason.MISSING_FIELD,
            field_name,
            lambda path: f"Missing required field: {path}",
        )

    @classmethod
    def wrong_type(cls, field_name: str, expected: str) -> "ValidationOutcome":
        return cls._failure(
            ValidationReason.INVALID_FIELD_TYPE,
            field_name,
            lambda path: f"Field '{path}' must be {expected}",
            expected,
        )

    @classmethod
    def deprecated(cls, field_name: str, since: str) -> "ValidationOutcome":
        return cls._failure(
            ValidationReason.DEPRECATED_FIELD,
            field_name,
            lambda path: f"Deprecated field '{path}' is not accepted by sing-box {since}+",
        )

    @classmethod
    def port_conflict(cls, field_name: str, port: int) -> "ValidationOutcome":
        return cls._failure(
            ValidationReason.PORT_CONFLICT,
            field_name,
            lambda path: f"Port conflict detected: port {port} is used by multiple inbounds",
        )

    def nested(self, prefix: str) -> "ValidationOutcome":
        """Returns the same outcome with its field path prefixed."""
        if self.valid or not self.field:
            return self
        path = f"{prefix}{self.field}" if self.field.startswith("[") else f"{prefix}.{self.field}"
        message = self.render_message(path) if self.render_message else self.message
        return replace(self, field=path, message=message)
