from __future__ import annotations

import asyncio
from typing import Any, Dict, List

from elasticsearch import ApiError, AsyncElasticsearch, BadRequestError, NotFoundError, TransportError

from ..config import SearchSettings, get_settings
from ..errors import DocumentTypeError
from ..models import (
    BootstrapReport,
    CollectionDocument,
    ConversationMessageDocument,
    EntityType,
    IndexBootstrapResult,
    IndexedDocument,
    NoteDocument,
    ResourceDocument,
    SearchHit,
    SearchRequest,
    SkillDocument,
    User,
    WriteResult,
)
from ..registry import IndexRegistry, IndexSpec, build_registry
from .query import build_search_body
from shared.logging import get_logger

logger = get_logger("search.gateway")

EngineError = (ApiError, TransportError)


def _error_type(exc: ApiError) -> str | None:
    body = exc.body
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("type")
    return None


class DocumentIndexGateway:
    """Upsert, delete and scoped search over one index per entity type.

    The engine client is injected and owned by the caller of ``close``.
    """

    def __init__(
        self,
        client: AsyncElasticsearch,
        registry: IndexRegistry | None = None,
        settings: SearchSettings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client
        self._registry = registry or build_registry(self._settings)

    @property
    def registry(self) -> IndexRegistry:
        return self._registry

    async def close(self) -> None:
        await self._client.close()

    # ------------------------------------------------------------------
    # bootstrap
    # ------------------------------------------------------------------

    async def bootstrap(self) -> BootstrapReport:
        specs = list(self._registry)
        outcomes = await asyncio.gather(*(self._ensure_index(spec) for spec in specs), return_exceptions=True)

        results: List[IndexBootstrapResult] = []
        for spec, outcome in zip(specs, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("index_bootstrap_failed", index=spec.index, error=repr(outcome))
                outcome = IndexBootstrapResult(
                    entity_type=spec.entity_type, index=spec.index, status="failed", error=repr(outcome)
                )
            results.append(outcome)

        report = BootstrapReport(results=results)
        logger.info(
            "index_bootstrap_complete",
            healthy=report.healthy,
            statuses={result.index: result.status for result in results},
        )
        return report

    async def _ensure_index(self, spec: IndexSpec) -> IndexBootstrapResult:
        try:
            if await self._client.indices.exists(index=spec.index):
                logger.info("index_exists", index=spec.index)
                return await self._check_mapping(spec)
            try:
                await self._client.indices.create(
                    index=spec.index,
                    settings=spec.index_settings(),
                    mappings=spec.mappings(),
                )
            except BadRequestError as exc:
                if _error_type(exc) != "resource_already_exists_exception":
                    raise
                logger.info("index_created_concurrently", index=spec.index)
                return await self._check_mapping(spec)
        except EngineError as exc:
            logger.error("index_bootstrap_failed", index=spec.index, error=repr(exc))
            return IndexBootstrapResult(entity_type=spec.entity_type, index=spec.index, status="failed", error=repr(exc))

        logger.info("index_created", index=spec.index)
        return IndexBootstrapResult(entity_type=spec.entity_type, index=spec.index, status="created")

    async def _check_mapping(self, spec: IndexSpec) -> IndexBootstrapResult:
        response = await self._client.indices.get_mapping(index=spec.index)
        live = response[spec.index].get("mappings", {}).get("properties", {})

        mismatches: List[str] = []
        for name, kind in spec.properties.items():
            found = live.get(name, {}).get("type")
            if found is None:
                mismatches.append(f"{name}: missing, expected {kind}")
            elif found != kind:
                mismatches.append(f"{name}: expected {kind}, found {found}")

        if mismatches:
            logger.warning("index_mapping_mismatch", index=spec.index, mismatches=mismatches)
            return IndexBootstrapResult(
                entity_type=spec.entity_type, index=spec.index, status="mismatch", mismatches=mismatches
            )
        return IndexBootstrapResult(entity_type=spec.entity_type, index=spec.index, status="exists")

    # ------------------------------------------------------------------
    # write path
    # ------------------------------------------------------------------

    def _write_params(self) -> Dict[str, Any]:
        return {"refresh": self._settings.refresh} if self._settings.refresh else {}

    async def upsert(self, entity_type: EntityType | str, document: IndexedDocument) -> WriteResult:
        spec = self._registry.get(entity_type)
        if not isinstance(document, spec.document_model):
            raise DocumentTypeError(
                f"{spec.entity_type.value} index expects {spec.document_model.__name__}, got {type(document).__name__}"
            )

        try:
            response = await self._client.index(
                index=spec.index,
                id=document.id,
                document=document.to_source(),
                **self._write_params(),
            )
        except EngineError as exc:
            logger.error("document_upsert_failed", index=spec.index, doc_id=document.id, error=repr(exc))
            raise

        logger.info("document_upserted", index=spec.index, doc_id=document.id)
        return WriteResult(id=document.id, index=spec.index, result=response["result"])

    async def delete(self, entity_type: EntityType | str, doc_id: str) -> WriteResult:
        spec = self._registry.get(entity_type)
        try:
            response = await self._client.delete(index=spec.index, id=doc_id, **self._write_params())
        except NotFoundError:
            logger.warning("document_delete_missing", index=spec.index, doc_id=doc_id)
            raise
        except EngineError as exc:
            logger.error("document_delete_failed", index=spec.index, doc_id=doc_id, error=repr(exc))
            raise

        logger.info("document_deleted", index=spec.index, doc_id=doc_id)
        return WriteResult(id=doc_id, index=spec.index, result=response["result"])

    async def upsert_resource(self, resource: ResourceDocument) -> WriteResult:
        return await self.upsert(EntityType.RESOURCE, resource)

    async def upsert_note(self, note: NoteDocument) -> WriteResult:
        return await self.upsert(EntityType.NOTE, note)

    async def upsert_collection(self, collection: CollectionDocument) -> WriteResult:
        return await self.upsert(EntityType.COLLECTION, collection)

    async def upsert_conversation_message(self, message: ConversationMessageDocument) -> WriteResult:
        return await self.upsert(EntityType.CONVERSATION_MESSAGE, message)

    async def upsert_skill(self, skill: SkillDocument) -> WriteResult:
        return await self.upsert(EntityType.SKILL, skill)

    async def delete_resource(self, resource_id: str) -> WriteResult:
        return await self.delete(EntityType.RESOURCE, resource_id)

    async def delete_note(self, note_id: str) -> WriteResult:
        return await self.delete(EntityType.NOTE, note_id)

    async def delete_collection(self, collection_id: str) -> WriteResult:
        return await self.delete(EntityType.COLLECTION, collection_id)

    async def delete_conversation_message(self, message_id: str) -> WriteResult:
        return await self.delete(EntityType.CONVERSATION_MESSAGE, message_id)

    async def delete_skill(self, skill_id: str) -> WriteResult:
        return await self.delete(EntityType.SKILL, skill_id)

    # ------------------------------------------------------------------
    # read path
    # ------------------------------------------------------------------

    async def search(self, entity_type: EntityType | str, user: User, request: SearchRequest) -> List[SearchHit]:
        spec = self._registry.get(entity_type)
        body = build_search_body(spec, user, request, max_limit=self._settings.max_search_limit)
        response = await self._client.search(index=spec.index, **body)
        hits = [SearchHit.model_validate(hit) for hit in response["hits"]["hits"]]
        logger.debug("search_complete", index=spec.index, hits=len(hits))
        return hits

    async def search_resources(self, user: User, request: SearchRequest) -> List[SearchHit]:
        return await self.search(EntityType.RESOURCE, user, request)

    async def search_notes(self, user: User, request: SearchRequest) -> List[SearchHit]:
        return await self.search(EntityType.NOTE, user, request)

    async def search_collections(self, user: User, request: SearchRequest) -> List[SearchHit]:
        return await self.search(EntityType.COLLECTION, user, request)

    async def search_conversation_messages(self, user: User, request: SearchRequest) -> List[SearchHit]:
        return await self.search(EntityType.CONVERSATION_MESSAGE, user, request)

    async def search_skills(self, user: User, request: SearchRequest) -> List[SearchHit]:
        return await self.search(EntityType.SKILL, user, request)


__all__ = ["DocumentIndexGateway"]
