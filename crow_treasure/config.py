"""Settings read from the environment (and a .env file at the repo root)."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

ROOT = Path(__file__).parent.parent

DEFAULT_RELAY_URL = "http://localhost:13015/api/deepseek"
DEFAULT_PROVIDER_URL = "https://api.deepseek.com/v1/chat/completions"


class Settings(BaseModel):
    relay_url: str = DEFAULT_RELAY_URL
    relay_api_key: str = ""
    relay_timeout: float | None = None  # None waits for the relay indefinitely
    model: str = "deepseek-chat"
    temperature: float = 0.8
    data_dir: Path = ROOT / "data"
    draw_delay: float = 3.0
    log_level: str = "WARNING"

    # Used by the relay service only
    provider_url: str = DEFAULT_PROVIDER_URL
    provider_api_key: str = ""


def load_settings(env_file: Path | None = None) -> Settings:
    """Build Settings from CROW_* / DEEPSEEK_* variables.

    Unset variables keep their defaults. Values are validated by pydantic, so
    a malformed number raises ValidationError here rather than later.
    """
    load_dotenv(env_file or ROOT / ".env")
    env = {
        "relay_url": os.getenv("CROW_RELAY_URL"),
        "relay_api_key": os.getenv("CROW_RELAY_API_KEY"),
        "relay_timeout": os.getenv("CROW_RELAY_TIMEOUT"),
        "model": os.getenv("CROW_MODEL"),
        "temperature": os.getenv("CROW_TEMPERATURE"),
        "data_dir": os.getenv("CROW_DATA_DIR"),
        "draw_delay": os.getenv("CROW_DRAW_DELAY"),
        "log_level": os.getenv("CROW_LOG_LEVEL"),
        "provider_url": os.getenv("DEEPSEEK_API_URL"),
        "provider_api_key": os.getenv("DEEPSEEK_API_KEY"),
    }
    return Settings(**{k: v for k, v in env.items() if v})
