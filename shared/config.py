"""Shared configuration for the campus assistant flows."""
import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Annotated, Optional

from langchain_core.runnables import RunnableConfig, ensure_config

_MODEL_DEFAULTS = {
    "chat_model": "gpt-4o-mini",
    "speech_model": "gpt-4o-mini-tts",
    "speech_voice": "alloy",
}


def _load_model_config() -> dict:
    """Load model configuration from JSON file."""
    config_path = Path(__file__).parent.parent / "model_config.json"
    if not config_path.exists():
        return dict(_MODEL_DEFAULTS)

    with open(config_path) as f:
        config = json.load(f)

    return {key: config.get(key, default) for key, default in _MODEL_DEFAULTS.items()}


@dataclass(kw_only=True)
class Configuration:
    """Shared configuration for the flow executor and its clients.

    This configuration provides:
    - OpenAI-compatible API key, base URL and networking limits from environment
    - Chat and speech model names from model_config.json
    - Executor limits (tool rounds, history turns)
    - Dependency injection via from_runnable_config()
    """

    # API KEY
    openai_api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY"),
        metadata={"description": "OpenAI API key"}
    )

    # Optional base URL for OpenAI-compatible APIs (e.g. a Gemini gateway)
    openai_base_url: Optional[str] = field(
        default_factory=lambda: os.getenv("OPENAI_BASE_URL"),
        metadata={"description": "Override base URL for OpenAI-compatible API (e.g. http://host:port/v1)"}
    )

    # Networking controls
    openai_timeout: int = field(
        default_factory=lambda: int(os.getenv("OPENAI_TIMEOUT", "60")),
        metadata={"description": "HTTP timeout (seconds) for model calls"}
    )
    openai_max_retries: int = field(
        default_factory=lambda: int(os.getenv("OPENAI_MAX_RETRIES", "0")),
        metadata={"description": "Client-level retries for model calls (0 = attempt once)"}
    )

    # Executor limits
    max_tool_rounds: int = field(
        default_factory=lambda: int(os.getenv("MAX_TOOL_ROUNDS", "5")),
        metadata={"description": "Tool-call rounds allowed per flow invocation"}
    )
    max_history_turns: int = field(
        default_factory=lambda: int(os.getenv("MAX_HISTORY_TURNS", "20")),
        metadata={"description": "Most recent conversation turns sent to the model"}
    )

    # MODELS
    chat_model: Annotated[str, {"__template_metadata__": {"kind": "llm"}}] = field(
        default_factory=lambda: _load_model_config()["chat_model"],
        metadata={"description": "Chat model used by every prompt flow"}
    )

    speech_model: str = field(
        default_factory=lambda: _load_model_config()["speech_model"],
        metadata={"description": "Text-to-speech model"}
    )

    speech_voice: str = field(
        default_factory=lambda: _load_model_config()["speech_voice"],
        metadata={"description": "Voice used for synthesized speech"}
    )

    @classmethod
    def from_runnable_config(
        cls, config: Optional[RunnableConfig] = None
    ) -> "Configuration":
        """Create Configuration from RunnableConfig for dependency injection."""
        cfg = ensure_config(config or {})
        data = cfg.get("configurable", {})
        return cls(**{k: v for k, v in data.items() if k in {f.name for f in fields(cls)}})

    def validate(self) -> None:
        """Validate that required configuration is present."""
        if not self.openai_api_key:
            raise ValueError(
                "OPENAI_API_KEY environment variable is not set. "
                "Please set it in your .env file or environment."
            )
        if self.max_tool_rounds < 1:
            raise ValueError("MAX_TOOL_ROUNDS must be at least 1.")
        if self.max_history_turns < 0:
            raise ValueError("MAX_HISTORY_TURNS must not be negative.")
