"""Centralized settings for opcorr."""

from __future__ import annotations

import logging
import sys
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_CHANNEL_MODES = ("memory", "log", "off")


def runtime_root() -> Path:
    """Directory searched for `.env`: the executable dir when frozen, else the project root."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[2]


def _load_env_file(env_file: Path) -> bool:
    """Load `.env` if it exists; a missing file is not an error."""
    if not env_file.exists():
        return False
    # utf-8-sig tolerates the BOM some Windows editors write.
    load_dotenv(env_file, override=False, encoding="utf-8-sig")
    logger.debug("[config] loaded env file: %s", env_file)
    return True


class OpcorrSettings(BaseSettings):
    """Telemetry client settings loaded from `OPCORR_*` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="OPCORR_",
        case_sensitive=False,
        extra="ignore",
    )

    instrumentation_key: str = Field(
        default="",
        description="Key stamped on every tracked telemetry item.",
    )

    channel_mode: str = Field(
        default="log",
        description="Where finished items go: memory|log|off.",
    )

    enable_operation_correlation: bool = Field(
        default=True,
        description="Register the operation correlation initializer on new clients.",
    )

    log_level: str = Field(default="INFO")

    @field_validator("instrumentation_key", mode="before")
    @classmethod
    def _coerce_instrumentation_key(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("channel_mode", mode="before")
    @classmethod
    def _coerce_channel_mode(cls, v):
        # Treat empty env vars as "unset" so we keep the intended default.
        if v is None or (isinstance(v, str) and not v.strip()):
            return "log"
        m = str(v).strip().lower()
        if m in ("disabled", "false", "0", "none"):
            return "off"
        if m not in _CHANNEL_MODES:
            logger.warning("[config] unknown channel_mode=%r; falling back to 'log'", v)
            return "log"
        return m

    @field_validator("log_level", mode="before")
    @classmethod
    def _coerce_log_level(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return "INFO"
        return str(v).strip().upper()


@lru_cache(maxsize=1)
def get_settings() -> OpcorrSettings:
    _load_env_file(runtime_root() / ".env")
    return OpcorrSettings()
