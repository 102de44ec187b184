from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class LLMConfig:
    """Groq chat-completion settings for the non-grounded AI helpers."""

    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = "llama-3.3-70b-versatile"
    timeout: float = 10.0
    max_tokens: int = 1024
    enabled: bool = True


@dataclass(frozen=True)
class GroundingConfig:
    """Gemini settings for calls that use the Maps / Search grounding tools."""

    api_key: str = os.getenv("GEMINI_API_KEY", os.getenv("API_KEY", ""))
    search_model: str = "gemini-2.5-flash"
    details_model: str = "gemini-2.5-flash"
    concierge_model: str = "gemini-2.5-flash"
    # restaurant details: 1 initial call + 2 retries waiting 1s then 2s
    max_attempts: int = 3
    backoff_seconds: float = 1.0
    max_backoff_seconds: float = 2.0
    enabled: bool = True


DEFAULT_LLM_CONFIG = LLMConfig()
DEFAULT_GROUNDING_CONFIG = GroundingConfig()
