from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from formassist import __version__
from formassist.config import Settings
from formassist_api.deps import get_settings_dep

router = APIRouter()

_start_time = datetime.now(timezone.utc)


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime


class InfoResponse(BaseModel):
    name: str
    version: str
    table_api_configured: bool
    default_model: str
    supported_models: list[str]
    uptime_seconds: float


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/info", response_model=InfoResponse)
async def get_info(
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> InfoResponse:
    uptime = (datetime.now(timezone.utc) - _start_time).total_seconds()

    return InfoResponse(
        name="FormAssist",
        version=__version__,
        table_api_configured=settings.table_api.is_configured(),
        default_model=settings.llm.default_model,
        supported_models=settings.llm.models,
        uptime_seconds=uptime,
    )
