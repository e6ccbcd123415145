"""Flow definitions, the invocation graph and its executor."""
from .base import FlowOutcome, FlowRegistry, FlowRuntime, PromptFlow, SpeechFlow
from .catalog import build_flow_registry
from .errors import (
    FlowError,
    InvalidInput,
    MalformedModelOutput,
    ModelServiceError,
    PromptRenderError,
    ToolExecutionError,
    UnknownFlow,
)
from .executor import FlowExecutor
from .model_client import (
    ChatModelClient,
    GenerateRequest,
    ModelClient,
    ModelReply,
    ToolCallRequest,
    ToolResult,
    ToolRound,
)
from .speech_client import OpenAISpeechClient, SpeechClient

__all__ = [
    "ChatModelClient",
    "FlowError",
    "FlowExecutor",
    "FlowOutcome",
    "FlowRegistry",
    "FlowRuntime",
    "GenerateRequest",
    "InvalidInput",
    "MalformedModelOutput",
    "ModelClient",
    "ModelReply",
    "ModelServiceError",
    "OpenAISpeechClient",
    "PromptFlow",
    "PromptRenderError",
    "SpeechClient",
    "SpeechFlow",
    "ToolCallRequest",
    "ToolExecutionError",
    "ToolResult",
    "ToolRound",
    "UnknownFlow",
    "build_flow_registry",
]
