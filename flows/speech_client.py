"""Outbound text-to-speech adapter."""
import logging
from typing import Callable, Optional, Protocol

from openai import AsyncOpenAI

from shared.config import Configuration
from shared.utils import get_speech_client

_logger = logging.getLogger("chat")


class SpeechClient(Protocol):
    async def synthesize(self, text: str) -> bytes:
        ...


class OpenAISpeechClient:
    """Synthesizes WAV audio with the OpenAI audio API."""

    response_format = "wav"

    def __init__(
        self,
        config: Configuration,
        client_factory: Callable[[Configuration], AsyncOpenAI] = get_speech_client,
    ):
        self.config = config
        self._client_factory = client_factory
        self._client: Optional[AsyncOpenAI] = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self.config.validate()
            self._client = self._client_factory(self.config)
        return self._client

    async def synthesize(self, text: str) -> bytes:
        client = self._get_client()
        _logger.info("TTS INPUT: %d chars, voice=%s", len(text), self.config.speech_voice)
        response = await client.audio.speech.create(
            model=self.config.speech_model,
            voice=self.config.speech_voice,
            input=text,
            response_format=self.response_format,
        )
        audio = response.content
        _logger.info("TTS OUTPUT: %d bytes", len(audio))
        return audio
