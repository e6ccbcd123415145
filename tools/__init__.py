"""Tool registry and campus lookup tools."""
from .campus import GET_LOCATION_INFO, LocationQuery, LocationRecord, build_tool_registry
from .registry import (
    NotFound,
    ToolArgumentsError,
    ToolDefinition,
    ToolError,
    ToolRegistry,
    ToolResultError,
    UnknownToolError,
)

__all__ = [
    "GET_LOCATION_INFO",
    "LocationQuery",
    "LocationRecord",
    "build_tool_registry",
    "NotFound",
    "ToolArgumentsError",
    "ToolDefinition",
    "ToolError",
    "ToolRegistry",
    "ToolResultError",
    "UnknownToolError",
]
