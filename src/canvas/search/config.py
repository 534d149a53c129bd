from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, Field


def _optional_env(name: str) -> str | None:
    value = os.getenv(name)
    return value or None


class SearchSettings(BaseModel):
    """Runtime configuration for the Search Service."""

    elasticsearch_url: str = Field(default_factory=lambda: os.getenv("ELASTICSEARCH_URL", "http://localhost:9200"))
    elasticsearch_username: str | None = Field(default_factory=lambda: _optional_env("ELASTICSEARCH_USERNAME"))
    elasticsearch_password: str | None = Field(default_factory=lambda: _optional_env("ELASTICSEARCH_PASSWORD"))
    elasticsearch_timeout: float = Field(default_factory=lambda: float(os.getenv("ELASTICSEARCH_TIMEOUT", "10.0")))
    refresh: str | None = Field(default_factory=lambda: _optional_env("ELASTICSEARCH_REFRESH"))
    index_prefix: str = Field(default_factory=lambda: os.getenv("SEARCH_INDEX_PREFIX", "refly"))
    default_analyzer: str = Field(default_factory=lambda: os.getenv("SEARCH_DEFAULT_ANALYZER", "icu_analyzer"))
    max_search_limit: int = Field(default_factory=lambda: int(os.getenv("SEARCH_MAX_LIMIT", "100")))
    service_name: str = Field(default_factory=lambda: os.getenv("SERVICE_NAME", "search-service"))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


@lru_cache(maxsize=1)
def get_settings() -> SearchSettings:
    return SearchSettings()


__all__ = ["SearchSettings", "get_settings"]
