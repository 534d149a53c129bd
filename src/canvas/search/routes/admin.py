from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..models import BootstrapReport
from ..services import DocumentIndexGateway
from .documents import get_gateway

router = APIRouter(prefix="/v1/admin", tags=["admin"])


@router.post("/bootstrap", response_model=BootstrapReport)
async def rerun_bootstrap(
    request: Request,
    gateway: DocumentIndexGateway = Depends(get_gateway),
) -> BootstrapReport:
    report = await gateway.bootstrap()
    request.app.state.bootstrap_report = report
    return report


__all__ = ["router"]
