"""Pydantic-backed schema validation with path-tagged violations."""
from .schema import (
    FlowModel,
    Schema,
    ValidationResult,
    Violation,
    adapter_for,
    format_path,
    to_json_schema,
    validate,
    violations_from,
)

__all__ = [
    "FlowModel",
    "Schema",
    "ValidationResult",
    "Violation",
    "adapter_for",
    "format_path",
    "to_json_schema",
    "validate",
    "violations_from",
]
