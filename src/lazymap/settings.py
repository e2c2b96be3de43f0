"""Runtime configuration for the mapper."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MapperSettings(BaseSettings):
    """Mapper behaviour switches, read from ``LAZYMAP_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LAZYMAP_",
        case_sensitive=False,
        extra="ignore",
    )

    match_camel_case: bool = Field(default=True)
    match_snake_case: bool = Field(default=True)
    cache_descriptors: bool = Field(default=True)


@lru_cache()
def get_settings() -> MapperSettings:
    return MapperSettings()
