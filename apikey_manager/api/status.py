import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from pydantic import BaseModel

logger = logging.getLogger(__name__)
router = APIRouter()


class StoreStats(BaseModel):
    keys_total: int
    keys_active: int
    usage_records: int


class SystemStatus(BaseModel):
    healthy: bool
    version: str
    store: StoreStats


@router.get("/status", response_model=SystemStatus)
async def get_system_status(request: Request):
    store = request.app.state.key_store
    settings = request.app.state.settings

    stats = store.get_stats(datetime.now(timezone.utc))

    return SystemStatus(
        healthy=True,
        version=settings.app_version,
        store=StoreStats(**stats),
    )
