"""
Schema Validator - checks structured values against declared shapes.

A shape is a pydantic model: field names (wire aliases), types, required or
optional, numeric bounds and enum options are declared on the model. Numeric
fields accept numeric-looking strings and are coerced; nothing else is
coerced silently.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

import pydantic
from pydantic import BaseModel

from .errors import FieldViolation, ValidationError

ShapeT = TypeVar("ShapeT", bound=BaseModel)

# pydantic error type -> (constraint, ctx key holding the bound)
_CONSTRAINTS: Dict[str, tuple] = {
    "missing": ("required", None),
    "greater_than_equal": ("min", "ge"),
    "greater_than": ("min", "gt"),
    "less_than_equal": ("max", "le"),
    "less_than": ("max", "lt"),
    "too_short": ("min_length", "min_length"),
    "string_too_short": ("min_length", "min_length"),
    "too_long": ("max_length", "max_length"),
    "string_too_long": ("max_length", "max_length"),
    "literal_error": ("enum", "expected"),
    "enum": ("enum", "expected"),
    "value_error": ("value", None),
}


@dataclass
class ShapeResult(Generic[ShapeT]):
    """Outcome of a validation: either a coerced value or violations."""
    value: Optional[ShapeT] = None
    violations: List[FieldViolation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations


def _field_name(loc: tuple) -> str:
    parts = [str(p) for p in loc]
    return ".".join(parts) if parts else "__root__"


def violations_from_errors(errors: List[Dict[str, Any]]) -> List[FieldViolation]:
    """Convert pydantic error dicts into field violations."""
    violations = []
    for error in errors:
        constraint, bound_key = _CONSTRAINTS.get(error.get("type", ""), ("type", None))
        ctx = error.get("ctx") or {}
        bound = ctx.get(bound_key) if bound_key else None
        message = error.get("msg", "Invalid value")
        if constraint == "required":
            message = "This field is required"
        violations.append(FieldViolation(
            field=_field_name(tuple(error.get("loc", ()))),
            constraint=constraint,
            message=message,
            bound=bound if bound is None or isinstance(bound, (int, float, str)) else str(bound),
        ))
    return violations


def validate_shape(shape: Type[ShapeT], value: Any) -> ShapeResult[ShapeT]:
    """
    Validate a value against a declared shape.

    Args:
        shape: pydantic model describing the fields
        value: raw value (usually a dict decoded from JSON)

    Returns:
        ShapeResult with the coerced model, or the list of violations
    """
    if isinstance(value, shape):
        return ShapeResult(value=value)
    if not isinstance(value, dict):
        return ShapeResult(violations=[FieldViolation(
            field="__root__",
            constraint="type",
            message=f"Expected an object, got {type(value).__name__}",
        )])
    try:
        return ShapeResult(value=shape.model_validate(value))
    except pydantic.ValidationError as e:
        return ShapeResult(violations=violations_from_errors(e.errors()))


def ensure_valid(shape: Type[ShapeT], value: Any) -> ShapeT:
    """Validate a value and raise ValidationError when it does not fit the shape."""
    result = validate_shape(shape, value)
    if not result.ok:
        raise ValidationError(result.violations)
    return result.value
