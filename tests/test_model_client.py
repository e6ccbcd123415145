import json

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from flows import ChatModelClient, GenerateRequest, ToolCallRequest, ToolResult, ToolRound
from flows.model_client import build_messages
from shared.config import Configuration
from tools import GET_LOCATION_INFO, build_tool_registry


class StubLLM:
    """Records what ChatModelClient binds and sends; answers with a fixed message."""

    def __init__(self, reply: AIMessage):
        self.reply = reply
        self.bound_tools = None
        self.bound_kwargs = {}
        self.messages = None

    def bind_tools(self, tools):
        self.bound_tools = tools
        return self

    def bind(self, **kwargs):
        self.bound_kwargs.update(kwargs)
        return self

    async def ainvoke(self, messages):
        self.messages = messages
        return self.reply


def _config(**overrides) -> Configuration:
    return Configuration(openai_api_key="sk-test", **overrides)


def test_build_messages_order():
    request = GenerateRequest(
        prompt="Where is it?",
        system_instruction="Be brief.",
        history=({"role": "user", "content": "hi"}, {"role": "model", "content": "hello"}),
        rounds=(
            ToolRound(
                calls=(ToolCallRequest(id="c1", name="getLocationInfo", arguments={"locationName": "Main Library"}),),
                results=(ToolResult(call_id="c1", name="getLocationInfo", content={"name": "Main Library"}),),
            ),
        ),
    )
    messages = build_messages(request)
    assert [type(m) for m in messages] == [
        SystemMessage,
        HumanMessage,
        AIMessage,
        HumanMessage,
        AIMessage,
        ToolMessage,
    ]
    assert messages[0].content == "Be brief."
    assert messages[3].content == "Where is it?"
    assert messages[4].tool_calls[0]["name"] == "getLocationInfo"
    assert messages[5].tool_call_id == "c1"
    assert json.loads(messages[5].content) == {"name": "Main Library"}


def test_build_messages_without_system():
    messages = build_messages(GenerateRequest(prompt="hi"))
    assert [type(m) for m in messages] == [HumanMessage]


@pytest.mark.asyncio
async def test_generate_plain_text():
    llm = StubLLM(AIMessage(content="  Hello there.  "))
    client = ChatModelClient(_config(), llm_factory=lambda cfg: llm)
    reply = await client.generate(GenerateRequest(prompt="hi"))
    assert reply.text == "Hello there."
    assert reply.tool_calls == ()
    assert llm.bound_tools is None
    assert llm.bound_kwargs == {}


@pytest.mark.asyncio
async def test_generate_binds_tools_and_parses_calls(reference_data):
    [lookup] = build_tool_registry(reference_data).as_tools([GET_LOCATION_INFO])
    llm = StubLLM(
        AIMessage(
            content="",
            tool_calls=[{"name": "getLocationInfo", "args": {"locationName": "Tech Building"}, "id": "call_abc"}],
        )
    )
    client = ChatModelClient(_config(), llm_factory=lambda cfg: llm)
    reply = await client.generate(GenerateRequest(prompt="hours?", tools=(lookup,)))
    assert llm.bound_tools == [lookup]
    [call] = reply.tool_calls
    assert call == ToolCallRequest(id="call_abc", name="getLocationInfo", arguments={"locationName": "Tech Building"})


@pytest.mark.asyncio
async def test_generate_json_mode():
    llm = StubLLM(AIMessage(content='{"summary": "ok"}'))
    client = ChatModelClient(_config(), llm_factory=lambda cfg: llm)
    reply = await client.generate(GenerateRequest(prompt="summarize", json_mode=True))
    assert llm.bound_kwargs == {"response_format": {"type": "json_object"}}
    assert reply.text == '{"summary": "ok"}'


@pytest.mark.asyncio
async def test_generate_collects_text_parts():
    llm = StubLLM(AIMessage(content=[{"type": "text", "text": "part one"}, "part two"]))
    client = ChatModelClient(_config(), llm_factory=lambda cfg: llm)
    reply = await client.generate(GenerateRequest(prompt="hi"))
    assert reply.text == "part one\npart two"


@pytest.mark.asyncio
async def test_missing_api_key_fails_on_first_use():
    built = []
    client = ChatModelClient(Configuration(openai_api_key=None), llm_factory=built.append)
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        await client.generate(GenerateRequest(prompt="hi"))
    assert built == []


@pytest.mark.asyncio
async def test_llm_is_built_once():
    built = []

    def factory(cfg):
        built.append(cfg)
        return StubLLM(AIMessage(content="ok"))

    client = ChatModelClient(_config(), llm_factory=factory)
    await client.generate(GenerateRequest(prompt="a"))
    await client.generate(GenerateRequest(prompt="b"))
    assert len(built) == 1
