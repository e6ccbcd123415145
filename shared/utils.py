"""Shared utilities for LLM and speech client creation."""
from typing import Optional

from langchain_openai import ChatOpenAI
from openai import AsyncOpenAI

from .config import Configuration
from .callbacks import ChatMessagesLogger


def _normalize_base_url(url: Optional[str]) -> Optional[str]:
    """Normalize user-provided base URL for OpenAI-compatible endpoints.

    - If it ends with "/chat/completions", strip that suffix.
    - Trim any trailing slash.
    """
    if not url:
        return url
    u = url.rstrip("/")
    if u.endswith("/chat/completions"):
        u = u[: -len("/chat/completions")]
    return u


def get_chat_llm(cfg: Configuration) -> ChatOpenAI:
    """Get the chat LLM instance shared by every prompt flow.

    Args:
        cfg: Configuration instance with API key and model settings

    Returns:
        ChatOpenAI instance; retries come from ``cfg.openai_max_retries``
        (0 by default, so each generate call is attempted once)
    """
    return ChatOpenAI(
        model=cfg.chat_model,
        api_key=cfg.openai_api_key,
        base_url=_normalize_base_url(cfg.openai_base_url),
        streaming=False,
        timeout=cfg.openai_timeout,
        max_retries=cfg.openai_max_retries,
        temperature=1.0,
        callbacks=[ChatMessagesLogger()],
    )


def get_speech_client(cfg: Configuration) -> AsyncOpenAI:
    """Get the raw OpenAI client used for text-to-speech."""
    return AsyncOpenAI(
        api_key=cfg.openai_api_key,
        base_url=_normalize_base_url(cfg.openai_base_url),
        timeout=cfg.openai_timeout,
        max_retries=cfg.openai_max_retries,
    )
