from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from ..models import EntityType, SearchHit, SearchRequest, User
from ..services import DocumentIndexGateway
from .documents import get_gateway, get_user

router = APIRouter(prefix="/v1/search", tags=["search"])


@router.post("/{entity_type}", response_model=List[SearchHit])
async def search(
    entity_type: EntityType,
    request: SearchRequest,
    user: User = Depends(get_user),
    gateway: DocumentIndexGateway = Depends(get_gateway),
) -> List[SearchHit]:
    return await gateway.search(entity_type, user, request)


__all__ = ["router"]
