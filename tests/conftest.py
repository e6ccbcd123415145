import sys
from pathlib import Path
from typing import Any, Iterable, List

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from campus_data import load_reference_data  # noqa: E402
from flows import FlowExecutor, GenerateRequest, ModelReply, ToolCallRequest, build_flow_registry  # noqa: E402
from tools import build_tool_registry  # noqa: E402


class FakeModelClient:
    """Scripted model: pops one reply per generate call and records every request.

    A reply may be a string (plain text), a ModelReply, or an exception to raise.
    """

    def __init__(self, replies: Iterable[Any] = ()):
        self.replies: List[Any] = list(replies)
        self.requests: List[GenerateRequest] = []

    def queue(self, *replies: Any) -> None:
        self.replies.extend(replies)

    async def generate(self, request: GenerateRequest) -> ModelReply:
        self.requests.append(request)
        if not self.replies:
            raise RuntimeError("FakeModelClient has no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, str):
            return ModelReply(text=reply)
        return reply


class FakeSpeechClient:
    def __init__(self, audio: Any = b"RIFF....WAVEfmt "):
        self.audio = audio
        self.texts: List[str] = []

    async def synthesize(self, text: str) -> bytes:
        self.texts.append(text)
        if isinstance(self.audio, Exception):
            raise self.audio
        return self.audio


def tool_call(name: str, arguments: Any, call_id: str = "call_1") -> ModelReply:
    """A model reply that asks for one tool call."""
    return ModelReply(text="", tool_calls=(ToolCallRequest(id=call_id, name=name, arguments=arguments),))


@pytest.fixture()
def reference_data():
    return load_reference_data()


@pytest.fixture()
def fake_model() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture()
def fake_speech() -> FakeSpeechClient:
    return FakeSpeechClient()


@pytest.fixture()
def make_executor(reference_data, fake_model, fake_speech):
    """Build an executor over the real registries and the fake clients."""

    def _make(model=None, speech=None, **limits) -> FlowExecutor:
        return FlowExecutor(
            flows=build_flow_registry(),
            tools=build_tool_registry(reference_data),
            model=model or fake_model,
            speech=speech or fake_speech,
            **limits,
        )

    return _make


@pytest.fixture()
def executor(make_executor) -> FlowExecutor:
    return make_executor()
