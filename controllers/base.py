"""Screen state shared by the chat and form controllers."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Type

from pydantic import Field, StrictStr

from flows import FlowError
from validation import FlowModel, Violation, validate

logger = logging.getLogger("campus.controllers")


class QueryForm(FlowModel):
    query: StrictStr = Field(min_length=1)


@dataclass(frozen=True)
class Notice:
    """A toast-style message for the user."""

    title: str
    description: str
    variant: str = "destructive"

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "description": self.description, "variant": self.variant}


class FormError(ValueError):
    """The user's form input was rejected before any flow ran."""

    http_status = 400

    def __init__(self, message: str, field: Optional[str] = None, violations: Optional[List[Violation]] = None):
        self.message = message
        self.field = field
        self.violations = violations or []
        super().__init__(message)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": "FormError", "message": self.message}
        if self.field:
            payload["field"] = self.field
        if self.violations:
            payload["violations"] = [v.to_dict() for v in self.violations]
        return payload


def check_form(form: Type[FlowModel], values: Mapping[str, Any], messages: Mapping[str, str]) -> Dict[str, Any]:
    """Validate form values, reporting the first bad field with its form message."""
    result = validate(form, values)
    if result.ok:
        return result.value
    first = result.violations[0]
    field = first.path.split(".")[0].split("[")[0]
    raise FormError(messages.get(field, first.message), field=field, violations=result.violations)


class ConversationHistory:
    """Ordered ``{role, content}`` turns owned by one screen."""

    def __init__(self) -> None:
        self._turns: List[Dict[str, str]] = []

    def append(self, role: str, content: str) -> Dict[str, str]:
        """Add a turn; the returned object identifies it for ``discard``."""
        turn = {"role": role, "content": content}
        self._turns.append(turn)
        return turn

    def discard(self, *turns: Dict[str, str]) -> None:
        """Remove exactly these turns (rollback of optimistic turns).

        Turns appended by other sends in the meantime stay where they are.
        """
        self._turns = [t for t in self._turns if not any(t is turn for turn in turns)]

    def clear(self) -> None:
        self._turns = []

    def to_list(self) -> List[Dict[str, str]]:
        return [dict(turn) for turn in self._turns]

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Dict[str, str]]:
        return iter(self.to_list())


class ChatController:
    """Optimistic chat screen over one flow.

    Subclasses set ``flow_name`` and may override ``build_payload`` and
    ``on_reply``. A failed flow call rolls back the optimistic user turn and
    leaves a generic ``notice``; the failure itself is kept in ``last_error``.
    """

    flow_name: str = ""
    sends_history = True
    query_message = "Please enter a question."
    failure_notice = Notice(
        "An error occurred.",
        "Sorry, I couldn't get a response at this time. Please try again later.",
    )

    def __init__(self, executor):
        self.executor = executor
        self.history = ConversationHistory()
        self.is_loading = False
        self.notice: Optional[Notice] = None
        self.last_error: Optional[FlowError] = None

    def build_payload(self, query: str, prior: List[Dict[str, str]]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"query": query}
        if self.sends_history:
            payload["history"] = prior
        return payload

    def on_reply(self, output: Dict[str, Any]) -> None:
        pass

    def check_query(self, query: Any) -> str:
        text = query.strip() if isinstance(query, str) else query
        return check_form(QueryForm, {"query": text}, {"query": self.query_message})["query"]

    async def send(self, query: Any) -> Optional[str]:
        """Send one message; returns the reply, or None when the flow failed."""
        text = self.check_query(query)
        payload = self.build_payload(text, self.history.to_list())
        user_turn = self.history.append("user", text)
        self.is_loading = True
        self.notice = None
        self.last_error = None
        try:
            output = await self.executor.run(self.flow_name, payload)
        except FlowError as exc:
            logger.warning("%s failed: %s (%s)", self.flow_name, exc.kind, exc.message)
            self.history.discard(user_turn)
            self.notice = self.failure_notice
            self.last_error = exc
            return None
        finally:
            self.is_loading = False

        self.history.append("model", output["response"])
        self.on_reply(output)
        return output["response"]

    def reset(self) -> None:
        self.history.clear()
        self.notice = None
        self.last_error = None
