"""Client configuration loaded from environment variables."""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "NOTIFY_",
        "extra": "ignore",
    }

    # Remote backend
    api_base_url: str = "http://localhost:8080"
    api_token: Optional[str] = None
    request_timeout_sec: float = Field(default=10.0, gt=0)

    # Feed polling
    poll_interval_sec: float = Field(default=30.0, gt=0)

    # Logging
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"


settings = Settings()
