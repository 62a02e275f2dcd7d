import os
from typing import Mapping, Optional

from pydantic import BaseModel

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o"


class Settings(BaseModel):
    """Runtime configuration, read once at startup and passed to the components that need it.

    A missing API key is a valid state: the activity source then serves the static pool only.
    """

    openai_api_key: Optional[str] = None
    openai_base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    temperature: float = 1.0
    request_timeout: float = 60.0
    transport_retries: int = 0
    log_level: str = "INFO"
    max_sessions: int = 1000

    @property
    def has_credential(self) -> bool:
        return bool(self.openai_api_key and self.openai_api_key.strip())

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        # Empty strings fall back to the field defaults.
        values = {
            "openai_api_key": env.get("OPENAI_API_KEY"),
            "openai_base_url": env.get("OPENAI_BASE_URL"),
            "model": env.get("OPENAI_MODEL"),
            "temperature": env.get("OPENAI_TEMPERATURE"),
            "request_timeout": env.get("OPENAI_TIMEOUT"),
            "transport_retries": env.get("OPENAI_MAX_RETRIES"),
            "log_level": env.get("LOG_LEVEL"),
            "max_sessions": env.get("MAX_SESSIONS"),
        }
        settings = cls(**{k: v for k, v in values.items() if v not in (None, "")})
        if settings.openai_base_url.endswith("/"):
            settings = settings.model_copy(update={"openai_base_url": settings.openai_base_url.rstrip("/")})
        return settings
