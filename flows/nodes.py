"""Nodes for the flow invocation graph."""
from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, List, Literal, Optional

from langchain_core.runnables import RunnableConfig
from langchain_core.utils.json import parse_json_markdown

from prompting import TemplateError
from tools import NotFound, ToolArgumentsError, ToolResultError, UnknownToolError
from validation import to_json_schema, validate

from .base import FlowOutcome, FlowRuntime, PromptFlow, SpeechFlow
from .errors import (
    FlowError,
    InvalidInput,
    MalformedModelOutput,
    ModelServiceError,
    PromptRenderError,
    ToolExecutionError,
)
from .model_client import GenerateRequest, ToolCallRequest, ToolResult, ToolRound
from .state import FlowState

logger = logging.getLogger("campus.flows")

JSON_REPLY_INSTRUCTION = (
    "Respond with a single JSON object and nothing else. "
    "It must match this JSON Schema:\n{schema}"
)


def get_runtime(config: Optional[RunnableConfig]) -> FlowRuntime:
    runtime = ((config or {}).get("configurable") or {}).get("runtime")
    if runtime is None:
        raise RuntimeError("Flow graph invoked without a runtime in config['configurable']")
    return runtime


def _flow(state: FlowState, config: Optional[RunnableConfig]):
    return get_runtime(config).flows.get(state.flow_name)


async def validate_input(
    state: FlowState, *, config: Optional[RunnableConfig] = None
) -> Dict:
    """Check the raw payload against the flow's input schema.

    A violation ends the run before any prompt is rendered or model called.
    """
    flow = _flow(state, config)
    result = validate(flow.input_schema, state.payload)
    if not result.ok:
        logger.info("Flow %s rejected input: %d violation(s)", flow.name, len(result.violations))
        raise InvalidInput(result.violations, flow_name=flow.name)
    data = result.value
    if isinstance(flow, PromptFlow) and flow.prepare is not None:
        data = flow.prepare(data)
    return {"data": data}


async def render_prompt(
    state: FlowState, *, config: Optional[RunnableConfig] = None
) -> Dict:
    """Render system instruction and prompt; pick the history turns to send."""
    runtime = get_runtime(config)
    flow: PromptFlow = runtime.flows.get(state.flow_name)
    data = state.data or {}
    try:
        system = flow.system.render(data) if flow.system is not None else None
        prompt = flow.prompt.render(data)
    except TemplateError as exc:
        raise PromptRenderError(str(exc), flow_name=flow.name) from exc

    if flow.structured:
        schema = json.dumps(to_json_schema(flow.response_schema), indent=2)
        prompt = f"{prompt}\n\n{JSON_REPLY_INSTRUCTION.format(schema=schema)}"

    history: List[Dict[str, Any]] = []
    if flow.history_field:
        turns = list(data.get(flow.history_field) or [])
        limit = runtime.max_history_turns
        history = turns[-limit:] if limit > 0 else []
        if len(history) < len(turns):
            logger.info(
                "Flow %s: sending %d of %d history turns", flow.name, len(history), len(turns)
            )
    return {"system": system, "prompt": prompt, "history": history}


async def call_model(
    state: FlowState, *, config: Optional[RunnableConfig] = None
) -> Dict:
    """One generate round trip; never retried here."""
    runtime = get_runtime(config)
    flow: PromptFlow = runtime.flows.get(state.flow_name)
    request = GenerateRequest(
        prompt=state.prompt or "",
        system_instruction=state.system,
        history=tuple(state.history),
        rounds=tuple(state.rounds),
        tools=tuple(runtime.tools.as_tools(flow.tools)) if flow.tools else (),
        json_mode=flow.structured,
    )
    try:
        reply = await runtime.model.generate(request)
    except FlowError:
        raise
    except Exception as exc:
        logger.warning("Flow %s: model call failed: %s", flow.name, exc)
        raise ModelServiceError(
            f"Model service call failed: {exc}", flow_name=flow.name
        ) from exc

    if reply.tool_calls and len(state.rounds) >= runtime.max_tool_rounds:
        raise MalformedModelOutput(
            f"Model requested tools after {runtime.max_tool_rounds} tool round(s)",
            flow_name=flow.name,
        )
    return {"reply": reply, "model_calls": state.model_calls + 1}


def _dispatch(runtime: FlowRuntime, flow: PromptFlow, call: ToolCallRequest) -> ToolResult:
    if call.name not in flow.tools:
        logger.info("Flow %s: model asked for unavailable tool %s", flow.name, call.name)
        return ToolResult(
            call_id=call.id,
            name=call.name,
            content={"error": f"Tool '{call.name}' is not available."},
            ok=False,
        )
    try:
        result = runtime.tools.invoke(call.name, call.arguments)
    except UnknownToolError as exc:
        return ToolResult(call.id, call.name, {"error": exc.message}, ok=False)
    except ToolArgumentsError as exc:
        return ToolResult(
            call.id,
            call.name,
            {"error": exc.message, "violations": [v.to_dict() for v in exc.violations]},
            ok=False,
        )
    except ToolResultError as exc:
        raise ToolExecutionError(str(exc), flow_name=flow.name, tool=call.name) from exc
    except Exception as exc:
        logger.exception("Flow %s: tool %s raised", flow.name, call.name)
        raise ToolExecutionError(
            f"{call.name}: {exc}", flow_name=flow.name, tool=call.name
        ) from exc

    if isinstance(result, NotFound):
        return ToolResult(call.id, call.name, result.to_payload(), ok=False)
    return ToolResult(call.id, call.name, result)


async def run_tools(
    state: FlowState, *, config: Optional[RunnableConfig] = None
) -> Dict:
    """Run the requested tool calls one at a time and record the round."""
    runtime = get_runtime(config)
    flow: PromptFlow = runtime.flows.get(state.flow_name)
    reply = state.reply
    results = tuple(_dispatch(runtime, flow, call) for call in reply.tool_calls)
    logger.info(
        "Flow %s: tool round %d -> %s",
        flow.name,
        len(state.rounds) + 1,
        [(r.name, r.ok) for r in results],
    )
    tool_round = ToolRound(calls=tuple(reply.tool_calls), results=results, text=reply.text)
    return {"rounds": [*state.rounds, tool_round], "reply": None}


async def synthesize_speech(
    state: FlowState, *, config: Optional[RunnableConfig] = None
) -> Dict:
    runtime = get_runtime(config)
    flow: SpeechFlow = runtime.flows.get(state.flow_name)
    if runtime.speech is None:
        raise ModelServiceError("No speech client configured", flow_name=flow.name)
    text = (state.data or {})[flow.text_field]
    try:
        audio = await runtime.speech.synthesize(text)
    except FlowError:
        raise
    except Exception as exc:
        logger.warning("Flow %s: speech call failed: %s", flow.name, exc)
        raise ModelServiceError(
            f"Speech service call failed: {exc}", flow_name=flow.name
        ) from exc
    if not audio:
        raise MalformedModelOutput("Speech service returned no audio", flow_name=flow.name)
    media = f"data:{flow.media_type};base64," + base64.b64encode(audio).decode("ascii")
    return {"media": media}


def _parse_structured(flow: PromptFlow, text: str) -> Dict[str, Any]:
    try:
        parsed = parse_json_markdown(text)
    except ValueError as exc:
        raise MalformedModelOutput(
            f"Model reply is not valid JSON: {exc}", flow_name=flow.name
        ) from exc
    checked = validate(flow.response_schema, parsed)
    if not checked.ok:
        raise MalformedModelOutput(
            "Model reply does not match the response schema",
            flow_name=flow.name,
            violations=checked.violations,
        )
    return checked.value


async def validate_output(
    state: FlowState, *, config: Optional[RunnableConfig] = None
) -> Dict:
    """Build the flow output and check it against the output schema."""
    flow = _flow(state, config)
    if isinstance(flow, SpeechFlow):
        candidate: Any = {"media": state.media}
    else:
        text = state.reply.text if state.reply is not None else ""
        structured = _parse_structured(flow, text) if flow.structured else None
        outcome = FlowOutcome(
            data=state.data or {},
            text=text,
            structured=structured,
            rounds=tuple(state.rounds),
        )
        candidate = flow.finalize(outcome)

    checked = validate(flow.output_schema, candidate)
    if not checked.ok:
        raise MalformedModelOutput(
            "Flow output does not match the output schema",
            flow_name=flow.name,
            violations=checked.violations,
        )
    return {"output": checked.value}


def route_input(
    state: FlowState, *, config: Optional[RunnableConfig] = None
) -> Literal["speech", "prompt"]:
    """Speech flows skip prompt rendering and the chat model."""
    flow = _flow(state, config)
    return "speech" if isinstance(flow, SpeechFlow) else "prompt"


def route_reply(state: FlowState) -> Literal["tools", "output"]:
    """Tool calls loop back through the registry; anything else is final."""
    if state.reply is not None and state.reply.tool_calls:
        return "tools"
    return "output"
