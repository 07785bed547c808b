"""Declarative argument schemas for tools.

A tool declares its arguments as a mapping of field name to ``FieldSpec``.
``validate_arguments`` checks a raw argument object against that mapping and
returns a new dict holding only the declared fields, with defaults applied.
``to_input_schema`` renders the same mapping as the JSON-Schema-like
``inputSchema`` object advertised during tool discovery.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Optional, Sequence

FieldKind = Literal["string", "number", "boolean", "enum"]

VALID_KINDS = {"string", "number", "boolean", "enum"}


class ArgumentValidationError(ValueError):
    """Raised when a tool argument violates its declared schema.

    Attributes:
        field: Name of the offending field, or None for whole-object errors
        detail: Human-readable description of the violation
    """

    def __init__(self, field: Optional[str], detail: str) -> None:
        self.field = field
        self.detail = detail
        super().__init__(f"{field}: {detail}" if field else detail)


class MissingFieldError(ArgumentValidationError):
    """Raised when a required field is absent."""

    def __init__(self, field: str) -> None:
        super().__init__(field, "required field is missing")


@dataclass(frozen=True)
class FieldSpec:
    """Type and constraints for a single tool argument.

    Attributes:
        kind: One of "string", "number", "boolean", "enum"
        required: Whether the caller must supply the field
        default: Value substituted when an optional field is absent
        description: Shown to clients in the discovery listing
        minimum: Inclusive lower bound for numbers
        maximum: Inclusive upper bound for numbers
        length: Exact length for strings
        min_length: Inclusive minimum length for strings
        max_length: Inclusive maximum length for strings
        allowed_values: Permitted values for enums
    """

    kind: FieldKind
    required: bool = False
    default: Any = None
    description: str = ""
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    length: Optional[int] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    allowed_values: Optional[Sequence[Any]] = None

    def __post_init__(self) -> None:
        if self.kind not in VALID_KINDS:
            raise ValueError(
                f"Unknown field kind: '{self.kind}'. "
                f"Valid kinds: {', '.join(sorted(VALID_KINDS))}"
            )
        if self.kind == "enum" and not self.allowed_values:
            raise ValueError("enum fields must declare allowed_values")
        if self.allowed_values is not None:
            object.__setattr__(self, "allowed_values", tuple(self.allowed_values))

    def check(self, name: str, value: Any) -> Any:
        """Validate one present value, returning it unchanged on success.

        Raises:
            ArgumentValidationError: If the value violates this field
        """
        if self.kind == "string":
            return self._check_string(name, value)
        if self.kind == "number":
            return self._check_number(name, value)
        if self.kind == "boolean":
            if not isinstance(value, bool):
                raise ArgumentValidationError(name, "expected boolean")
            return value
        if value not in self.allowed_values:  # enum
            allowed = ", ".join(str(v) for v in self.allowed_values)
            raise ArgumentValidationError(name, f"must be one of: {allowed}")
        return value

    def _check_string(self, name: str, value: Any) -> str:
        if not isinstance(value, str):
            raise ArgumentValidationError(name, "expected string")
        if self.length is not None and len(value) != self.length:
            raise ArgumentValidationError(
                name, f"must be exactly {self.length} characters"
            )
        if self.min_length is not None and len(value) < self.min_length:
            raise ArgumentValidationError(
                name, f"must be at least {self.min_length} characters"
            )
        if self.max_length is not None and len(value) > self.max_length:
            raise ArgumentValidationError(
                name, f"must be at most {self.max_length} characters"
            )
        return value

    def _check_number(self, name: str, value: Any) -> float:
        # bool is an int subclass; JSON true/false is not a number
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ArgumentValidationError(name, "expected number")
        if not math.isfinite(value):
            raise ArgumentValidationError(name, "must be a finite number")
        if self.minimum is not None and value < self.minimum:
            raise ArgumentValidationError(name, f"must be >= {_fmt(self.minimum)}")
        if self.maximum is not None and value > self.maximum:
            raise ArgumentValidationError(name, f"must be <= {_fmt(self.maximum)}")
        return value

    def to_json_schema(self) -> dict[str, Any]:
        """Render this field as a JSON Schema property."""
        if self.kind == "enum":
            prop: dict[str, Any] = {"type": "string", "enum": list(self.allowed_values)}
        else:
            prop = {"type": self.kind}
        if self.description:
            prop["description"] = self.description
        if self.minimum is not None:
            prop["minimum"] = self.minimum
        if self.maximum is not None:
            prop["maximum"] = self.maximum
        if self.length is not None:
            prop["minLength"] = self.length
            prop["maxLength"] = self.length
        if self.min_length is not None:
            prop["minLength"] = self.min_length
        if self.max_length is not None:
            prop["maxLength"] = self.max_length
        if self.default is not None:
            prop["default"] = self.default
        return prop


Schema = Mapping[str, FieldSpec]


def _fmt(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)


def validate_arguments(raw_args: Any, schema: Schema) -> dict[str, Any]:
    """Validate raw tool arguments against a schema.

    Undeclared keys are ignored so that clients may attach extra metadata.
    JSON ``null`` is treated the same as an absent field.

    Args:
        raw_args: The ``params``/``arguments`` object from the request (None = empty)
        schema: Mapping of field name to FieldSpec

    Returns:
        A new dict with only the declared fields, defaults filled in

    Raises:
        MissingFieldError: If a required field is absent
        ArgumentValidationError: If a present field fails its checks, or
            raw_args is not an object
    """
    if raw_args is None:
        raw_args = {}
    if not isinstance(raw_args, Mapping):
        raise ArgumentValidationError(None, "arguments must be an object")

    validated: dict[str, Any] = {}
    for name, spec in schema.items():
        value = raw_args.get(name)
        if value is None:
            if spec.required:
                raise MissingFieldError(name)
            if spec.default is not None:
                validated[name] = spec.default
            continue
        validated[name] = spec.check(name, value)
    return validated


def to_input_schema(schema: Schema) -> dict[str, Any]:
    """Render a schema as the ``inputSchema`` object used in tool discovery."""
    return {
        "type": "object",
        "properties": {name: spec.to_json_schema() for name, spec in schema.items()},
        "required": [name for name, spec in schema.items() if spec.required],
    }


__all__ = [
    "FieldKind",
    "FieldSpec",
    "Schema",
    "ArgumentValidationError",
    "MissingFieldError",
    "validate_arguments",
    "to_input_schema",
]
