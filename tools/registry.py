"""Named, schema-typed tools the model may call mid-generation."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Type

from langchain_core.tools import StructuredTool

from validation import FlowModel, Schema, Violation, validate

logger = logging.getLogger("campus.tools")

ToolHandler = Callable[[Dict[str, Any]], Any]


@dataclass(frozen=True)
class NotFound:
    """Negative tool result: the lookup matched nothing.

    Returned, never raised; the model is expected to tell the user.
    """

    message: str

    def to_payload(self) -> Dict[str, Any]:
        return {"found": False, "message": self.message}


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: Type[FlowModel]
    output_schema: Schema
    handler: ToolHandler


class ToolError(Exception):
    """Base class for tool registry failures."""

    def __init__(self, tool_name: str, message: str):
        self.tool_name = tool_name
        self.message = message
        super().__init__(f"{tool_name}: {message}")


class UnknownToolError(ToolError):
    pass


class ToolArgumentsError(ToolError):
    def __init__(self, tool_name: str, violations: List[Violation]):
        self.violations = violations
        details = "; ".join(f"{v.path or '<root>'}: {v.message}" for v in violations)
        super().__init__(tool_name, f"invalid arguments ({details})")


class ToolResultError(ToolError):
    def __init__(self, tool_name: str, violations: List[Violation]):
        self.violations = violations
        details = "; ".join(f"{v.path or '<root>'}: {v.message}" for v in violations)
        super().__init__(tool_name, f"handler returned an invalid result ({details})")


class ToolRegistry:
    """Tools registered once at startup and looked up by name."""

    def __init__(self) -> None:
        self._tools: Dict[str, ToolDefinition] = {}

    def register(
        self,
        name: str,
        description: str,
        input_schema: Type[FlowModel],
        output_schema: Schema,
        handler: ToolHandler,
    ) -> ToolDefinition:
        """Store a tool. A second registration under the same name replaces the first."""
        if name in self._tools:
            logger.info("Replacing tool registration: %s", name)
        definition = ToolDefinition(
            name=name,
            description=description,
            input_schema=input_schema,
            output_schema=output_schema,
            handler=handler,
        )
        self._tools[name] = definition
        return definition

    def get(self, name: str) -> ToolDefinition:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name, "tool is not registered") from None

    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def as_tools(self, names: Optional[Iterable[str]] = None) -> List[StructuredTool]:
        """LangChain tools for ``bind_tools``; calling one goes through ``invoke``."""
        selected = self._tools.values() if names is None else [self.get(n) for n in names]
        return [
            StructuredTool.from_function(
                func=self._runner(tool.name),
                name=tool.name,
                description=tool.description,
                args_schema=tool.input_schema,
            )
            for tool in selected
        ]

    def _runner(self, name: str) -> Callable[..., Any]:
        def _run(**arguments: Any) -> Any:
            return self.invoke(name, arguments)

        return _run

    def invoke(self, name: str, arguments: Any) -> Any:
        """Validate arguments, run the handler and validate what it returned.

        Returns the handler result, or a ``NotFound`` sentinel unchanged.
        """
        tool = self.get(name)
        checked = validate(tool.input_schema, arguments)
        if not checked.ok:
            raise ToolArgumentsError(name, checked.violations)

        result = tool.handler(checked.value)
        if isinstance(result, NotFound):
            logger.info("Tool %s found nothing for %s", name, checked.value)
            return result

        checked_result = validate(tool.output_schema, result)
        if not checked_result.ok:
            raise ToolResultError(name, checked_result.violations)
        return checked_result.value
