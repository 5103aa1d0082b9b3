from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict
from dotenv import load_dotenv
import os

#Load .env at import time for convenience
load_dotenv(dotenv_path=Path(".") / '.env')


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass
class Settings:
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # "vertex" (Gemini on Vertex AI) or "openai"
    LLM_PROVIDER: str = os.getenv("LLM_PROVIDER", "vertex")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "gemini-2.0-flash-001")
    LLM_TEMPERATURE: float = _float_env("LLM_TEMPERATURE", 0.2)
    LLM_MAX_OUTPUT_TOKENS: int = _int_env("LLM_MAX_OUTPUT_TOKENS", 512)
    LLM_TIMEOUT_SECS: float = _float_env("LLM_TIMEOUT_SECS", 30.0)
    LLM_MAX_ATTEMPTS: int = _int_env("LLM_MAX_ATTEMPTS", 1)

    GOOGLE_CLOUD_PROJECT: str | None = os.getenv("GOOGLE_CLOUD_PROJECT")
    GOOGLE_CLOUD_REGION: str = os.getenv("GOOGLE_CLOUD_REGION", "us-central1")

    OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")

    CORS_ORIGINS: list[str] = field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:9002").split(",")
            if o.strip()
        ]
    )

settings = Settings()


def _as_tree(s: Settings) -> Dict[str, Dict[str, Any]]:
    return {
        "llm": {
            "provider": s.LLM_PROVIDER,
            "model": s.LLM_MODEL,
            "temperature": s.LLM_TEMPERATURE,
            "max_output_tokens": s.LLM_MAX_OUTPUT_TOKENS,
            "timeout_secs": s.LLM_TIMEOUT_SECS,
            "max_attempts": s.LLM_MAX_ATTEMPTS,
        },
        "vertex": {
            "project": s.GOOGLE_CLOUD_PROJECT,
            "region": s.GOOGLE_CLOUD_REGION,
        },
        "openai": {
            "api_key": s.OPENAI_API_KEY,
            "model": s.OPENAI_MODEL,
        },
        "service": {
            "cors_origins": s.CORS_ORIGINS,
        },
    }


def cfg(section: str, key: str, default: Any = None) -> Any:
    """
    Nested lookup over the current settings, e.g. cfg("llm", "model").
    Returns `default` when the section/key is missing or the value is None.
    """
    value = _as_tree(settings).get(section, {}).get(key)
    return default if value is None else value
