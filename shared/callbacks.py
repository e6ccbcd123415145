"""LangChain callbacks for request introspection."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List
from uuid import UUID

from langchain_core.callbacks import BaseCallbackHandler
from langchain_core.messages import AIMessage, BaseMessage, ToolMessage

_logger = logging.getLogger("chat")


def _preview(text: Any, limit: int = 300) -> str:
    s = str(text)
    return s if len(s) <= limit else s[:limit] + "... [truncated]"


def summarize_messages(batch: List[BaseMessage]) -> List[Dict[str, Any]]:
    """Compact role/tool view of one request's messages."""
    compact = []
    for m in batch:
        entry: Dict[str, Any] = {"role": m.type}
        if isinstance(m, AIMessage) and m.tool_calls:
            # log tool names only
            entry["tool_calls"] = [tc["name"] for tc in m.tool_calls]
        if isinstance(m, ToolMessage):
            entry["tool_call_id"] = m.tool_call_id
        if isinstance(m.content, str) and m.content:
            entry["content"] = _preview(m.content, 180)
        compact.append(entry)
    return compact


class ChatMessagesLogger(BaseCallbackHandler):
    """Logs roles and key fields of messages on chat model start.

    Useful to verify proper tool_call -> tool sequencing with OpenAI-compatible backends.
    """

    def on_chat_model_start(
        self,
        serialized: Dict[str, Any],
        messages: List[List[BaseMessage]],
        *,
        run_id: UUID,
        parent_run_id: UUID | None = None,
        **kwargs: Any,
    ) -> None:
        if not _logger.handlers:
            return  # logging disabled
        # one list per generation; only the first is sent
        batch = messages[0] if messages else []
        compact = summarize_messages(batch)
        _logger.info("LLM REQ MESSAGES: %s", json.dumps(compact, ensure_ascii=False))
        if any("tool_calls" in entry for entry in compact):
            _logger.info("LLM REQ HAS assistant.tool_calls preceding any tool messages")
