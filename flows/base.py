"""Flow definitions and the registry the executor resolves them from."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, Union

from prompting import PromptTemplate
from tools import ToolRegistry
from validation import FlowModel, to_json_schema

from .errors import UnknownFlow
from .model_client import ModelClient, ToolRound
from .speech_client import SpeechClient

logger = logging.getLogger("campus.flows")


@dataclass(frozen=True)
class FlowOutcome:
    """Everything a finalizer may draw on to build the flow output."""

    data: Dict[str, Any]
    text: str
    structured: Optional[Dict[str, Any]] = None
    rounds: Tuple[ToolRound, ...] = ()


def default_finalize(outcome: FlowOutcome) -> Dict[str, Any]:
    """Structured replies pass through; free text becomes ``{response}``."""
    if outcome.structured is not None:
        return dict(outcome.structured)
    return {"response": outcome.text}


@dataclass(frozen=True)
class PromptFlow:
    """A flow answered by one (possibly tool-augmented) chat model call.

    ``response_schema`` switches the model into JSON mode and validates the
    parsed reply; ``history_field`` names the input field that carries prior
    turns; ``prepare`` may reshape validated input before rendering.
    """

    name: str
    description: str
    input_schema: Type[FlowModel]
    output_schema: Type[FlowModel]
    prompt: PromptTemplate
    system: Optional[PromptTemplate] = None
    response_schema: Optional[Type[FlowModel]] = None
    tools: Tuple[str, ...] = ()
    history_field: Optional[str] = None
    prepare: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None
    finalize: Callable[[FlowOutcome], Dict[str, Any]] = field(default=default_finalize)

    @property
    def structured(self) -> bool:
        return self.response_schema is not None


@dataclass(frozen=True)
class SpeechFlow:
    """A flow answered by the speech service instead of the chat model."""

    name: str
    description: str
    input_schema: Type[FlowModel]
    output_schema: Type[FlowModel]
    text_field: str = "text"
    media_type: str = "audio/wav"


Flow = Union[PromptFlow, SpeechFlow]


class FlowRegistry:
    """Flows registered once at startup and looked up by name."""

    def __init__(self) -> None:
        self._flows: Dict[str, Flow] = {}

    def register(self, flow: Flow) -> Flow:
        if flow.name in self._flows:
            logger.info("Replacing flow registration: %s", flow.name)
        self._flows[flow.name] = flow
        return flow

    def get(self, name: str) -> Flow:
        try:
            return self._flows[name]
        except KeyError:
            raise UnknownFlow(name) from None

    def names(self) -> List[str]:
        return list(self._flows)

    def __contains__(self, name: object) -> bool:
        return name in self._flows

    def __len__(self) -> int:
        return len(self._flows)

    def describe(self) -> List[Dict[str, Any]]:
        """Name, description and JSON schemas of every registered flow."""
        return [
            {
                "name": flow.name,
                "description": flow.description,
                "inputSchema": to_json_schema(flow.input_schema),
                "outputSchema": to_json_schema(flow.output_schema),
            }
            for flow in self._flows.values()
        ]


@dataclass
class FlowRuntime:
    """Collaborators one executor hands to every node through the run config."""

    flows: FlowRegistry
    tools: ToolRegistry
    model: ModelClient
    speech: Optional[SpeechClient] = None
    max_tool_rounds: int = 5
    max_history_turns: int = 20
