"""Outbound adapter to the chat model.

The executor talks to the model through ``generate(GenerateRequest)``; the
default implementation builds LangChain messages and calls ``ChatOpenAI``.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, ToolMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from langchain_core.tools import BaseTool
from langchain_openai import ChatOpenAI

from shared.chat_logging import safe_preview
from shared.config import Configuration
from shared.utils import get_chat_llm

_logger = logging.getLogger("chat")


@dataclass(frozen=True)
class ToolCallRequest:
    id: str
    name: str
    arguments: Dict[str, Any]


@dataclass(frozen=True)
class ToolResult:
    """What one tool call produced, as fed back to the model.

    ``ok`` is False for not-found sentinels and for calls the executor
    refused (unknown tool, bad arguments).
    """

    call_id: str
    name: str
    content: Any
    ok: bool = True


@dataclass(frozen=True)
class ToolRound:
    """One model turn that requested tools, plus the results sent back."""

    calls: Tuple[ToolCallRequest, ...]
    results: Tuple[ToolResult, ...]
    text: str = ""


@dataclass(frozen=True)
class GenerateRequest:
    prompt: str
    system_instruction: Optional[str] = None
    history: Tuple[Dict[str, str], ...] = ()
    rounds: Tuple[ToolRound, ...] = ()
    tools: Tuple[BaseTool, ...] = ()
    json_mode: bool = False


@dataclass(frozen=True)
class ModelReply:
    text: str
    tool_calls: Tuple[ToolCallRequest, ...] = ()


class ModelClient(Protocol):
    async def generate(self, request: GenerateRequest) -> ModelReply:
        ...


def _coerce_text(message: AIMessage) -> str:
    """Extract plain text from an AIMessage-like object robustly."""
    content = getattr(message, "content", None)
    if isinstance(content, str):
        return content.strip()
    # Structured content (list of parts): collect text parts
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict):
                if part.get("type") == "text" and part.get("text"):
                    parts.append(part["text"])
                elif isinstance(part.get("content"), str):
                    parts.append(part["content"])
        return "\n".join(parts).strip()
    return ""


def history_to_messages(history: Sequence[Dict[str, str]]) -> List[BaseMessage]:
    """Map ``{role: user|model, content}`` turns onto LangChain messages."""
    messages: List[BaseMessage] = []
    for turn in history:
        if turn["role"] == "user":
            messages.append(HumanMessage(content=turn["content"]))
        else:
            messages.append(AIMessage(content=turn["content"]))
    return messages


def rounds_to_messages(rounds: Sequence[ToolRound]) -> List[BaseMessage]:
    """Replay tool rounds as assistant tool_calls followed by tool messages."""
    messages: List[BaseMessage] = []
    for tool_round in rounds:
        messages.append(
            AIMessage(
                content=tool_round.text,
                tool_calls=[
                    {"id": call.id, "name": call.name, "args": call.arguments}
                    for call in tool_round.calls
                ],
            )
        )
        for result in tool_round.results:
            messages.append(
                ToolMessage(
                    content=json.dumps(result.content, ensure_ascii=False),
                    tool_call_id=result.call_id,
                )
            )
    return messages


def build_messages(request: GenerateRequest) -> List[BaseMessage]:
    """Lay out system, history, prompt and tool scratchpad in request order."""
    parts: List[Any] = []
    if request.system_instruction:
        parts.append(("system", "{system}"))
    parts.extend(
        [
            MessagesPlaceholder(variable_name="chat_history"),
            ("human", "{input}"),
            MessagesPlaceholder(variable_name="agent_scratchpad"),
        ]
    )
    template = ChatPromptTemplate.from_messages(parts)
    values: Dict[str, Any] = {
        "input": request.prompt,
        "chat_history": history_to_messages(request.history),
        "agent_scratchpad": rounds_to_messages(request.rounds),
    }
    if request.system_instruction:
        values["system"] = request.system_instruction
    return template.format_messages(**values)


def _reply_from_message(message: AIMessage) -> ModelReply:
    calls = tuple(
        ToolCallRequest(
            id=tc.get("id") or f"call_{index}",
            name=tc["name"],
            arguments=tc.get("args") or {},
        )
        for index, tc in enumerate(getattr(message, "tool_calls", None) or [])
    )
    return ModelReply(text=_coerce_text(message), tool_calls=calls)


class ChatModelClient:
    """``ModelClient`` backed by ``ChatOpenAI``.

    The LLM is built on first use so that a process without an API key can
    still start; the missing key then surfaces as a ``ValueError`` from
    ``generate``.
    """

    def __init__(
        self,
        config: Configuration,
        llm_factory: Callable[[Configuration], ChatOpenAI] = get_chat_llm,
    ):
        self.config = config
        self._llm_factory = llm_factory
        self._llm: Optional[ChatOpenAI] = None

    def _get_llm(self) -> ChatOpenAI:
        if self._llm is None:
            self.config.validate()
            self._llm = self._llm_factory(self.config)
            _logger.info("Chat model initialized - model=%s", self.config.chat_model)
        return self._llm

    async def generate(self, request: GenerateRequest) -> ModelReply:
        runnable: Any = self._get_llm()
        if request.tools:
            runnable = runnable.bind_tools(list(request.tools))
        if request.json_mode:
            runnable = runnable.bind(response_format={"type": "json_object"})

        messages = build_messages(request)
        _logger.info(
            "MODEL INPUT: %s",
            json.dumps(
                {
                    "prompt": safe_preview(request.prompt, 300),
                    "history_len": len(request.history),
                    "rounds": len(request.rounds),
                    "tools": [tool.name for tool in request.tools],
                    "json_mode": request.json_mode,
                }
            ),
        )
        message = await runnable.ainvoke(messages)
        reply = _reply_from_message(message)
        _logger.info(
            "MODEL OUTPUT: %s (tool_calls=%s)",
            safe_preview(reply.text),
            [call.name for call in reply.tool_calls],
        )
        return reply
