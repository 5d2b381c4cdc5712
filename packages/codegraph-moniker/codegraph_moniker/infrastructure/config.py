"""
Centralized configuration for the moniker engine.

Usage:
    from codegraph_moniker.infrastructure.config import MonikerSettings, get_settings

    # Use default settings
    scheme = get_settings().scheme

    # Override for a specific pass
    custom = MonikerSettings(local_digest_bytes=20)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SCHEME = "tsc"


class MonikerSettings(BaseSettings):
    """
    Root configuration for moniker generation.

    Can be configured via:
    - Environment variables (prefixed with CODEGRAPH_MONIKER_)
    - Direct instantiation

    Examples:
        CODEGRAPH_MONIKER_SCHEME=tsc
        CODEGRAPH_MONIKER_EMIT_DEFINITION_ITEMS=false
    """

    model_config = SettingsConfigDict(
        env_prefix="CODEGRAPH_MONIKER_",
        case_sensitive=False,
        extra="ignore",
    )

    scheme: str = Field(default=DEFAULT_SCHEME, min_length=1)
    """Moniker scheme naming the producing tool"""

    local_digest_bytes: int = Field(default=16, ge=8, le=32)
    """SHA-256 prefix length (bytes) for local moniker identifiers"""

    emit_definition_items: bool = Field(default=True)
    """Emit `definitions` item edges next to `references` item edges"""

    language_id: str = Field(default="typescript")
    """languageId written on document vertices"""

    log_level: str = Field(default="INFO")
    log_format: Literal["console", "json"] = Field(default="console")


@lru_cache(maxsize=1)
def get_settings() -> MonikerSettings:
    """
    Get the global settings instance.

    The settings are cached. To reload, call get_settings.cache_clear() first.
    """
    return MonikerSettings()
