"""
Runtime settings read from the environment (optionally via a .env file).
"""
import os
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from dotenv import load_dotenv

from shared.protocol import Provider

logger = logging.getLogger('Config')

_settings = None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}, using {default}")
        return default


@dataclass(frozen=True)
class Settings:
    default_credentials: Dict[Provider, str] = field(default_factory=dict)
    llm_timeout: float = 30.0
    llm_max_retries: int = 2
    max_tool_rounds: int = 5
    weather_timeout: float = 10.0
    openrouter_referer: str = "https://skymind.weather"
    openrouter_title: str = "SkyMind Weather"
    data_dir: str = "data"
    port: int = 8001
    log_level: str = "INFO"

    def default_credential(self, provider: Provider) -> Optional[str]:
        return self.default_credentials.get(provider)


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build Settings from the process environment."""
    load_dotenv(env_file, override=True)

    credentials = {}
    # API_KEY is the historical name of the default provider's key
    gemini_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    if gemini_key:
        credentials[Provider.GEMINI] = gemini_key
    for provider, var in ((Provider.GROQ, "GROQ_API_KEY"),
                          (Provider.MISTRAL, "MISTRAL_API_KEY"),
                          (Provider.OPENROUTER, "OPENROUTER_API_KEY")):
        value = os.getenv(var)
        if value:
            credentials[provider] = value

    settings = Settings(
        default_credentials=credentials,
        llm_timeout=_env_float("LLM_TIMEOUT", 30.0),
        llm_max_retries=max(0, _env_int("LLM_MAX_RETRIES", 2)),
        max_tool_rounds=max(0, _env_int("CHAT_MAX_TOOL_ROUNDS", 5)),
        weather_timeout=_env_float("WEATHER_TIMEOUT", 10.0),
        openrouter_referer=os.getenv("OPENROUTER_REFERER", "https://skymind.weather"),
        openrouter_title=os.getenv("OPENROUTER_TITLE", "SkyMind Weather"),
        data_dir=os.getenv("SKYMIND_DATA_DIR", "data"),
        port=_env_int("SKYMIND_PORT", 8001),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
    logger.info(f"Settings loaded: fallback credentials for "
                f"{sorted(p.value for p in credentials) or 'no providers'}")
    global _settings
    _settings = settings
    return settings


def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
