"""Runs registered flows through the invocation graph."""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from campus_data import ReferenceData
from shared.config import Configuration
from tools import ToolRegistry, build_tool_registry

from .base import FlowRegistry, FlowRuntime
from .catalog import build_flow_registry
from .errors import FlowError
from .graph import flow_graph
from .model_client import ChatModelClient, ModelClient
from .speech_client import OpenAISpeechClient, SpeechClient
from .state import FlowState

logger = logging.getLogger("campus.flows")


class FlowExecutor:
    """Entry point for running a flow by name.

    Example::

        executor = FlowExecutor.from_config(Configuration(), load_reference_data())
        output = await executor.run("campusGuideFlow", {"query": "When does the library open?"})
    """

    def __init__(
        self,
        flows: FlowRegistry,
        tools: ToolRegistry,
        model: ModelClient,
        speech: Optional[SpeechClient] = None,
        *,
        max_tool_rounds: int = 5,
        max_history_turns: int = 20,
    ):
        self.runtime = FlowRuntime(
            flows=flows,
            tools=tools,
            model=model,
            speech=speech,
            max_tool_rounds=max_tool_rounds,
            max_history_turns=max_history_turns,
        )

    @classmethod
    def from_config(cls, config: Configuration, data: ReferenceData) -> "FlowExecutor":
        """Build registries and the LangChain/OpenAI clients from configuration."""
        return cls(
            flows=build_flow_registry(),
            tools=build_tool_registry(data),
            model=ChatModelClient(config),
            speech=OpenAISpeechClient(config),
            max_tool_rounds=config.max_tool_rounds,
            max_history_turns=config.max_history_turns,
        )

    @property
    def flows(self) -> FlowRegistry:
        return self.runtime.flows

    @property
    def tools(self) -> ToolRegistry:
        return self.runtime.tools

    def _run_config(self) -> Dict[str, Any]:
        return {
            "configurable": {"runtime": self.runtime},
            # two graph steps per tool round plus the fixed stages
            "recursion_limit": 2 * self.runtime.max_tool_rounds + 10,
        }

    async def run(self, flow_name: str, payload: Any) -> Dict[str, Any]:
        """Validate, invoke and validate again; returns the flow output.

        Raises:
            FlowError: a subclass naming the failure kind.
        """
        self.runtime.flows.get(flow_name)
        started = time.perf_counter()
        logger.info("Flow %s started", flow_name)
        try:
            result = await flow_graph.ainvoke(
                FlowState(flow_name=flow_name, payload=payload),
                config=self._run_config(),
            )
        except FlowError as exc:
            logger.info(
                "Flow %s failed: %s (%s) after %.2fs",
                flow_name,
                exc.kind,
                exc.message,
                time.perf_counter() - started,
            )
            raise

        # Handle both dict and object results
        if isinstance(result, dict):
            output = result.get("output")
            model_calls = result.get("model_calls", 0)
        else:
            output = result.output
            model_calls = result.model_calls
        logger.info(
            "Flow %s done in %.2fs (model_calls=%d)",
            flow_name,
            time.perf_counter() - started,
            model_calls,
        )
        return output
