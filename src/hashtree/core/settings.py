"""
Central configuration for hashtree.

This module provides a single, typed configuration object that reads from
environment variables (12-factor style) using pydantic-settings.

Usage:

    from hashtree.core.settings import load_settings

    settings = load_settings()
    builder = TreeBuilder(hash_fn, aggregate_fn, block_size=settings.block_size)

Environment variables are prefixed with ``HASHTREE_``, e.g.
``HASHTREE_BLOCK_SIZE=4096``.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hashtree.protocol.enums import TieBreak
from hashtree.protocol.errors import ConfigurationError
from hashtree.utils.logging import apply_log_level


DEFAULT_BLOCK_SIZE = 1024
DEFAULT_FAN_OUT = 2


class HashTreeSettings(BaseSettings):
    """
    Defaults used by TreeBuilder and ConsistencyChecker when the caller
    does not pass an explicit value.
    """

    block_size: int = Field(
        default=DEFAULT_BLOCK_SIZE,
        ge=1,
        description="Size in bytes of each leaf block.",
    )
    fan_out: int = Field(
        default=DEFAULT_FAN_OUT,
        ge=2,
        description="Maximum number of children per internal node.",
    )
    tie_break: TieBreak = Field(
        default=TieBreak.EMPTY,
        description="'empty' pads missing siblings with b''; 'omit' skips them.",
    )
    hash_algorithm: str = Field(
        default="sha1",
        description="hashlib algorithm used by HashScheme.default().",
    )
    domain_separated: bool = Field(
        default=False,
        description="Prefix leaf (0x00) and internal (0x01) inputs before hashing.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Log level for the 'hashtree' logger (DEBUG/INFO/WARNING/ERROR).",
    )

    model_config = SettingsConfigDict(env_prefix="HASHTREE_")

    @field_validator("tie_break", mode="before")
    @classmethod
    def _normalize_tie_break(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("hash_algorithm")
    @classmethod
    def _normalize_algorithm(cls, v: str) -> str:
        return (v or "sha1").strip().lower()

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        v = (v or "WARNING").strip().upper()
        if v == "WARN":
            return "WARNING"
        return v


@lru_cache(maxsize=1)
def get_settings() -> HashTreeSettings:
    """
    Cached accessor for HashTreeSettings.

    Call ``get_settings.cache_clear()`` after changing the environment.
    """
    return HashTreeSettings()


def load_settings() -> HashTreeSettings:
    """
    get_settings() for library code.

    Raises:
        ConfigurationError: If a HASHTREE_* variable fails validation
    """
    try:
        settings = get_settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid HASHTREE_* configuration: {e}") from e

    apply_log_level(settings.log_level)
    return settings
