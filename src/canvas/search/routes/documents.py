from __future__ import annotations

import json
from typing import Any, Dict

from elasticsearch import NotFoundError
from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request, status
from pydantic import ValidationError

from ..models import EntityType, User, WriteResult
from ..services import DocumentIndexGateway

router = APIRouter(prefix="/v1/index", tags=["index"])


def get_gateway(request: Request) -> DocumentIndexGateway:
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="search gateway not initialized")
    return gateway


def get_user(x_user_id: str | None = Header(default=None)) -> User:
    # TODO: replace with session/JWT extraction once the API gateway forwards verified claims
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="X-User-Id header required")
    return User(uid=x_user_id)


@router.put("/{entity_type}/documents", response_model=WriteResult)
async def upsert_document(
    entity_type: EntityType,
    payload: Dict[str, Any] = Body(...),
    gateway: DocumentIndexGateway = Depends(get_gateway),
) -> WriteResult:
    model = gateway.registry.get(entity_type).document_model
    try:
        document = model.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=json.loads(exc.json(include_url=False)),
        ) from exc
    return await gateway.upsert(entity_type, document)


@router.delete("/{entity_type}/documents/{doc_id}", response_model=WriteResult)
async def delete_document(
    entity_type: EntityType,
    doc_id: str,
    gateway: DocumentIndexGateway = Depends(get_gateway),
) -> WriteResult:
    try:
        return await gateway.delete(entity_type, doc_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity_type.value} {doc_id} not indexed") from exc


__all__ = ["get_gateway", "get_user", "router"]
