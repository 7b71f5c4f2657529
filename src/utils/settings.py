"""
Settings loader for the relay API.

Values come from environment variables (optionally seeded from a local
.env file) and are validated into a single pydantic model that the app
factory hands to every component.
"""

from __future__ import annotations

import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}

DEFAULT_CORS_ORIGINS = ["https://banglavoice.ai", "http://localhost:3000"]


class RelaySettings(BaseModel):
    """Runtime configuration for gateway, image provider and storage."""

    sslc_sandbox: bool = False
    sslc_store_id: str = ""
    sslc_store_password: str = ""

    success_url: str = ""
    fail_url: str = ""
    cancel_url: str = ""

    # Empty disables the x-internal-token check.
    internal_shared_token: str = ""

    pollinations_api_key: str = ""

    integrations_mode: str = "real"
    redis_url: Optional[str] = None

    cors_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    gateway_timeout_seconds: float = Field(default=20.0, gt=0)
    image_timeout_seconds: float = Field(default=60.0, gt=0)
    image_request_delay: float = Field(default=1.0, ge=0.0)
    max_images: int = Field(default=10, ge=1, le=100)

    port: int = Field(default=5000, ge=1, le=65535)

    @property
    def use_mock_gateway(self) -> bool:
        return self.integrations_mode.strip().lower() in {"mock", "test"}


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUTHY


def _env_list(name: str) -> Optional[List[str]]:
    raw = os.getenv(name)
    if raw is None:
        return None
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_settings() -> RelaySettings:
    """
    Build settings from the process environment.

    A .env file in the working directory is loaded first; variables already
    present in the environment win.

    Raises:
        ValidationError: If a numeric variable cannot be parsed or is out of range
    """
    load_dotenv()

    data = {
        "sslc_sandbox": _env_flag("SSLC_SANDBOX"),
        "sslc_store_id": os.getenv("SSLC_STORE_ID", ""),
        "sslc_store_password": os.getenv("SSLC_STORE_PASSWORD", ""),
        "success_url": os.getenv("SUCCESS_URL", ""),
        "fail_url": os.getenv("FAIL_URL", ""),
        "cancel_url": os.getenv("CANCEL_URL", ""),
        "internal_shared_token": os.getenv("INTERNAL_SHARED_TOKEN", ""),
        "pollinations_api_key": os.getenv("POLLINATIONS_API_KEY", ""),
        "integrations_mode": os.getenv("INTEGRATIONS_MODE", "real"),
        "redis_url": os.getenv("REDIS_URL") or None,
    }

    origins = _env_list("CORS_ORIGINS")
    if origins is not None:
        data["cors_origins"] = origins
    if os.getenv("IMAGE_REQUEST_DELAY"):
        data["image_request_delay"] = os.environ["IMAGE_REQUEST_DELAY"]
    if os.getenv("PORT"):
        data["port"] = os.environ["PORT"]

    try:
        settings = RelaySettings(**data)
    except ValidationError as e:
        logger.error(f"Settings validation failed: {e}")
        raise

    logger.info(
        "Settings loaded: sandbox=%s mode=%s redis=%s internal_token=%s image_key=%s",
        settings.sslc_sandbox,
        settings.integrations_mode,
        bool(settings.redis_url),
        "set" if settings.internal_shared_token else "not set",
        "set" if settings.pollinations_api_key else "not set",
    )
    return settings
