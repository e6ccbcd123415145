"""Shared configuration and utilities."""
from .chat_logging import enable_chat_logging
from .config import Configuration
from .utils import get_chat_llm, get_speech_client

__all__ = ["Configuration", "enable_chat_logging", "get_chat_llm", "get_speech_client"]
