"""Pydantic schemas for flow inputs, flow outputs and tool arguments.

Schemas are ``FlowModel`` subclasses (or any type a ``TypeAdapter`` accepts).
``validate()`` runs pydantic and returns either the normalized value, dumped
back to plain JSON-shaped data, or every violation pydantic reported, each
tagged with the path of the offending field. ``to_json_schema()`` is the
same declaration rendered for the model: tool parameters, structured
replies and the flow catalog.

Scalars are declared strict (``StrictStr``, ``StrictInt``, ``StrictFloat``)
so nothing is coerced; undeclared keys are dropped; non-finite floats are
rejected.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List, Sequence, Union

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

# a FlowModel subclass, any type TypeAdapter accepts, or a TypeAdapter
Schema = Any

# pydantic error type -> constraint name reported to callers
_CONSTRAINTS = {
    "missing": "required",
    "string_too_short": "min_length",
    "string_too_long": "max_length",
    "string_pattern_mismatch": "pattern",
    "too_short": "min_items",
    "too_long": "max_items",
    "greater_than_equal": "minimum",
    "greater_than": "minimum",
    "less_than_equal": "maximum",
    "less_than": "maximum",
    "literal_error": "enum",
    "enum": "enum",
    "finite_number": "finite",
    "int_from_float": "integer",
}


class FlowModel(BaseModel):
    """Base for every flow, tool and form schema."""

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)


@dataclass(frozen=True)
class Violation:
    """One failed constraint."""

    path: str
    constraint: str
    actual: Any
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "constraint": self.constraint,
            "actual": _preview(self.actual),
            "message": self.message,
        }


@dataclass
class ValidationResult:
    """Outcome of validating one value against one schema."""

    value: Any = None
    violations: List[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations


def _preview(value: Any, limit: int = 120) -> Any:
    if isinstance(value, str) and len(value) > limit:
        return value[:limit] + "... [truncated]"
    if isinstance(value, (dict, list, tuple)):
        return type(value).__name__
    if isinstance(value, float) and not math.isfinite(value):
        return repr(value)
    return value


def format_path(loc: Sequence[Union[str, int]]) -> str:
    """``("history", 1, "role")`` -> ``history[1].role``."""
    path = ""
    for key in loc:
        if isinstance(key, int):
            path += f"[{key}]"
        else:
            path = f"{path}.{key}" if path else str(key)
    return path


def _constraint(error_type: str) -> str:
    if error_type in _CONSTRAINTS:
        return _CONSTRAINTS[error_type]
    if error_type.endswith("_type") or error_type.endswith("_parsing"):
        return "type"
    return error_type


def violations_from(exc: ValidationError) -> List[Violation]:
    """Map pydantic's error list onto ``Violation`` records."""
    violations = []
    for error in exc.errors(include_url=False):
        constraint = _constraint(error["type"])
        violations.append(
            Violation(
                path=format_path(error["loc"]),
                constraint=constraint,
                actual=None if constraint == "required" else error.get("input"),
                message=error["msg"],
            )
        )
    return violations


@lru_cache(maxsize=256)
def _cached_adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def adapter_for(schema: Schema) -> TypeAdapter:
    if isinstance(schema, TypeAdapter):
        return schema
    if isinstance(schema, type):
        return _cached_adapter(schema)
    # typing constructs (Annotated, List[...]) may carry unhashable metadata
    return TypeAdapter(schema)


def validate(schema: Schema, value: Any) -> ValidationResult:
    """Validate ``value`` against ``schema``.

    The normalized value (``None`` fields left out) is only meaningful when
    the result is ``ok``.
    """
    adapter = adapter_for(schema)
    try:
        parsed = adapter.validate_python(value)
    except ValidationError as exc:
        return ValidationResult(violations=violations_from(exc))
    return ValidationResult(value=adapter.dump_python(parsed, by_alias=True, exclude_none=True))


def to_json_schema(schema: Schema) -> Dict[str, Any]:
    """JSON Schema for ``schema`` as pydantic renders it."""
    return adapter_for(schema).json_schema(by_alias=True)
