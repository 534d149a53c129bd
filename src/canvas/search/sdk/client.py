from __future__ import annotations

from typing import Any, Dict, List

import httpx

from ..models import EntityType, IndexedDocument, SearchHit, SearchRequest, WriteResult


class SearchServiceClient:
    """Lightweight SDK for interacting with the Search Service."""

    def __init__(self, base_url: str, user_id: str | None = None, timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._user_id = user_id
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._user_id:
            headers["X-User-Id"] = self._user_id
        return headers

    def _documents_url(self, entity_type: EntityType) -> str:
        return f"{self._base_url}/v1/index/{EntityType(entity_type).value}/documents"

    @staticmethod
    def _hits(payload: List[Dict[str, Any]]) -> List[SearchHit]:
        return [SearchHit.model_validate(hit) for hit in payload]

    def upsert(self, entity_type: EntityType, document: IndexedDocument) -> WriteResult:
        response = httpx.put(
            self._documents_url(entity_type),
            json=document.to_source(),
            headers=self._headers(),
            timeout=self._timeout,
        )
        response.raise_for_status()
        return WriteResult.model_validate(response.json())

    def delete(self, entity_type: EntityType, doc_id: str) -> WriteResult:
        response = httpx.delete(
            f"{self._documents_url(entity_type)}/{doc_id}",
            headers=self._headers(),
            timeout=self._timeout,
        )
        response.raise_for_status()
        return WriteResult.model_validate(response.json())

    def search(self, entity_type: EntityType, request: SearchRequest) -> List[SearchHit]:
        response = httpx.post(
            f"{self._base_url}/v1/search/{EntityType(entity_type).value}",
            json=request.model_dump(mode="json", by_alias=True, exclude_none=True),
            headers=self._headers(),
            timeout=self._timeout,
        )
        response.raise_for_status()
        return self._hits(response.json())

    async def aupsert(self, entity_type: EntityType, document: IndexedDocument) -> WriteResult:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.put(
                self._documents_url(entity_type),
                json=document.to_source(),
                headers=self._headers(),
            )
        response.raise_for_status()
        return WriteResult.model_validate(response.json())

    async def adelete(self, entity_type: EntityType, doc_id: str) -> WriteResult:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.delete(
                f"{self._documents_url(entity_type)}/{doc_id}",
                headers=self._headers(),
            )
        response.raise_for_status()
        return WriteResult.model_validate(response.json())

    async def asearch(self, entity_type: EntityType, request: SearchRequest) -> List[SearchHit]:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(
                f"{self._base_url}/v1/search/{EntityType(entity_type).value}",
                json=request.model_dump(mode="json", by_alias=True, exclude_none=True),
                headers=self._headers(),
            )
        response.raise_for_status()
        return self._hits(response.json())


__all__ = ["SearchServiceClient"]
