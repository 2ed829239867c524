# Configuration module for environment setup and API client initialization
# This module is imported by: main.py, dependencies.py, run_conversation.py
# Dependencies: python-dotenv, openai
# Purpose: Centralized configuration management and API client creation

import os  # For accessing environment variables from system
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from dotenv import load_dotenv  # For loading .env files into environment
from openai import AsyncOpenAI  # OpenAI client for API calls

# Load .env once at import so DATABASE_URL is visible to core.database
load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from the environment (see .env)."""
    openai_model: str = "gpt-4o-mini"
    max_tokens: int = 500
    base_temperature: float = 0.7
    database_url: str = "sqlite:///./conversations.db"
    cors_origins: Tuple[str, ...] = ("http://localhost:5173", "http://127.0.0.1:5173")
    log_level: str = "INFO"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Build Settings from environment variables.
    Called by: dependencies.py, main.py, core/database.py
    Unset variables fall back to the dataclass defaults.
    """
    defaults = Settings()
    origins = os.getenv("CORS_ORIGINS")
    return Settings(
        openai_model=os.getenv("OPENAI_MODEL", defaults.openai_model),
        max_tokens=_int_env("OPENAI_MAX_TOKENS", defaults.max_tokens),
        base_temperature=_float_env("OPENAI_TEMPERATURE", defaults.base_temperature),
        database_url=os.getenv("DATABASE_URL", defaults.database_url),
        cors_origins=(
            tuple(o.strip() for o in origins.split(",") if o.strip())
            if origins else defaults.cors_origins
        ),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
    )


def load_environment():
    """
    Load environment variables from .env file and validate OpenAI API key
    Called by: get_openai_async_client()
    Returns: OpenAI API key string
    Raises: ValueError if API key is not found
    """
    load_dotenv()
    openai_key = os.getenv("OPENAI_API_KEY")
    if not openai_key:
        raise ValueError("OPEN AI KEY NOT LOADED")
    return openai_key


def get_openai_async_client():
    """
    Initialize and return the async OpenAI client with API key
    Called by: dependencies.get_engine(), run_conversation.py
    Usage: client = get_openai_async_client() -> client.chat.completions.create(...)
    """
    api_key = load_environment()
    return AsyncOpenAI(api_key=api_key)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once; framework loggers are kept at WARNING."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    for noisy in ("sqlalchemy.engine", "httpx", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
