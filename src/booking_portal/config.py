"""Runtime settings read from the environment."""

import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.servicem8.com/api_1.0"


class Settings(BaseModel):
    """Portal settings. Build with Settings.from_env() in production."""

    api_base: str = DEFAULT_API_BASE
    api_key: str = ""
    timeout: float = Field(default=30.0, gt=0, description="Seconds per upstream page request")
    db_path: Path = Path("booking_portal.db")
    users_path: Optional[Path] = None
    request_deadline: Optional[float] = Field(
        default=None,
        gt=0,
        description="Seconds an API request may spend on upstream calls",
    )
    host: str = "127.0.0.1"
    port: int = 3001

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from UPSTREAM_* and BOOKING_PORTAL_* variables."""
        env = os.environ
        data: dict = {
            "api_base": (env.get("UPSTREAM_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
            "api_key": (env.get("UPSTREAM_API_KEY") or "").strip(),
        }
        if env.get("UPSTREAM_TIMEOUT"):
            data["timeout"] = env["UPSTREAM_TIMEOUT"]
        if env.get("BOOKING_PORTAL_DB"):
            data["db_path"] = env["BOOKING_PORTAL_DB"]
        if env.get("BOOKING_PORTAL_USERS"):
            data["users_path"] = env["BOOKING_PORTAL_USERS"]
        if env.get("BOOKING_PORTAL_REQUEST_DEADLINE"):
            data["request_deadline"] = env["BOOKING_PORTAL_REQUEST_DEADLINE"]
        if env.get("BOOKING_PORTAL_HOST"):
            data["host"] = env["BOOKING_PORTAL_HOST"]
        if env.get("PORT"):
            data["port"] = env["PORT"]

        settings = cls.model_validate(data)
        if not settings.api_key:
            logger.warning("UPSTREAM_API_KEY is not set; upstream calls will be rejected")
        return settings
