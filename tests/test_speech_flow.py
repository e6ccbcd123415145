import base64
from types import SimpleNamespace

import pytest

from conftest import FakeSpeechClient
from flows import InvalidInput, MalformedModelOutput, ModelServiceError, OpenAISpeechClient
from shared.config import Configuration


@pytest.mark.asyncio
async def test_text_to_speech_returns_wav_data_uri(executor, fake_speech, fake_model):
    output = await executor.run("textToSpeechFlow", {"text": "Breathe in slowly."})
    assert output["media"].startswith("data:audio/wav;base64,")
    encoded = output["media"].split(",", 1)[1]
    assert base64.b64decode(encoded) == fake_speech.audio
    assert fake_speech.texts == ["Breathe in slowly."]
    assert fake_model.requests == []


@pytest.mark.asyncio
async def test_empty_text_is_rejected(executor, fake_speech):
    with pytest.raises(InvalidInput):
        await executor.run("textToSpeechFlow", {"text": ""})
    assert fake_speech.texts == []


@pytest.mark.asyncio
async def test_empty_audio_is_malformed(make_executor):
    executor = make_executor(speech=FakeSpeechClient(audio=b""))
    with pytest.raises(MalformedModelOutput):
        await executor.run("textToSpeechFlow", {"text": "hello"})


@pytest.mark.asyncio
async def test_speech_service_failure(make_executor):
    executor = make_executor(speech=FakeSpeechClient(audio=TimeoutError("tts timed out")))
    with pytest.raises(ModelServiceError) as excinfo:
        await executor.run("textToSpeechFlow", {"text": "hello"})
    assert "tts timed out" in excinfo.value.message


class _StubSpeechAPI:
    def __init__(self):
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(content=b"RIFFdata")


@pytest.mark.asyncio
async def test_openai_speech_client_requests_wav():
    speech_api = _StubSpeechAPI()
    stub = SimpleNamespace(audio=SimpleNamespace(speech=speech_api))
    config = Configuration(openai_api_key="sk-test", speech_model="tts-test", speech_voice="nova")
    client = OpenAISpeechClient(config, client_factory=lambda cfg: stub)

    assert await client.synthesize("hello") == b"RIFFdata"
    assert speech_api.calls == [
        {"model": "tts-test", "voice": "nova", "input": "hello", "response_format": "wav"}
    ]


@pytest.mark.asyncio
async def test_openai_speech_client_needs_api_key():
    client = OpenAISpeechClient(Configuration(openai_api_key=None), client_factory=lambda cfg: None)
    with pytest.raises(ValueError):
        await client.synthesize("hello")
