from __future__ import annotations

from elasticsearch import AsyncElasticsearch

from .config import SearchSettings, get_settings


def create_client(settings: SearchSettings | None = None) -> AsyncElasticsearch:
    """Build the engine client injected into the gateway.

    Retries stay disabled; callers see engine failures directly.
    """

    settings = settings or get_settings()
    basic_auth = None
    if settings.elasticsearch_username:
        basic_auth = (settings.elasticsearch_username, settings.elasticsearch_password or "")
    return AsyncElasticsearch(
        hosts=[settings.elasticsearch_url],
        basic_auth=basic_auth,
        request_timeout=settings.elasticsearch_timeout,
        max_retries=0,
        retry_on_timeout=False,
    )


__all__ = ["create_client"]
