from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, status

from ..models import BootstrapReport

router = APIRouter(prefix="/v1/index", tags=["index"])


@router.get("/status", response_model=BootstrapReport)
async def index_status(request: Request) -> BootstrapReport:
    report = getattr(request.app.state, "bootstrap_report", None)
    if report is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="bootstrap has not run")
    return report


__all__ = ["router"]
