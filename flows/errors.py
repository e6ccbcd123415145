"""Failure kinds a flow invocation can end in.

Every failure is scoped to one invocation and reported to its caller; the
HTTP layer maps ``http_status`` and ``to_payload()`` straight onto the
response.
"""
from typing import Any, Dict, Iterable, Optional

from validation import Violation


class FlowError(Exception):
    """Base class for flow failures."""

    kind = "FlowError"
    http_status = 500

    def __init__(self, message: str, *, flow_name: Optional[str] = None, **extra: Any):
        self.message = message
        self.flow_name = flow_name
        self.extra = extra
        super().__init__(message)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.flow_name:
            payload["flow"] = self.flow_name
        payload.update(self.extra)
        return payload


def _violation_dicts(violations: Iterable[Violation]):
    return [v.to_dict() for v in violations]


class InvalidInput(FlowError):
    """The input failed the flow's input schema; the model was never called."""

    kind = "InvalidInput"
    http_status = 422

    def __init__(self, violations: Iterable[Violation], *, flow_name: Optional[str] = None):
        self.violations = list(violations)
        super().__init__(
            f"Input failed validation ({len(self.violations)} violation(s))",
            flow_name=flow_name,
            violations=_violation_dicts(self.violations),
        )


class ModelServiceError(FlowError):
    kind = "ModelServiceError"
    http_status = 502


class MalformedModelOutput(FlowError):
    """The reply was not JSON, broke the output schema, or tool rounds ran out."""

    kind = "MalformedModelOutput"
    http_status = 502

    def __init__(
        self,
        message: str,
        *,
        flow_name: Optional[str] = None,
        violations: Iterable[Violation] = (),
    ):
        self.violations = list(violations)
        extra = {"violations": _violation_dicts(self.violations)} if self.violations else {}
        super().__init__(message, flow_name=flow_name, **extra)


class ToolExecutionError(FlowError):
    kind = "ToolExecutionError"
    http_status = 500


class PromptRenderError(FlowError):
    kind = "PromptRenderError"
    http_status = 500


class UnknownFlow(FlowError):
    kind = "UnknownFlow"
    http_status = 404

    def __init__(self, flow_name: str):
        super().__init__(f"No flow registered under '{flow_name}'", flow_name=flow_name)
