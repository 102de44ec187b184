"""
Service-wide configuration.

Values come from the environment (optionally a ``.env`` file at the project
root). Every setting has a default so the API boots without any keys; the
AI-backed features degrade to their fallbacks in that case.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")


@dataclass(frozen=True)
class AppConfig:
    title: str = "Food.ily API"
    version: str = "1.0.0"
    session_secret: str = os.getenv("SESSION_SECRET", "foodily-secret-change-in-production")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    places_api_key: str = os.getenv("GOOGLE_PLACES_API_KEY", "")


DEFAULT_APP_CONFIG = AppConfig()
