from typing import Any, Literal

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from launchpal.shared.db import get_db
from launchpal.shared.auth import require_scope
from launchpal.platforms.service import connect, disconnect, list_platforms, trending

router = APIRouter(prefix="/api", tags=["Platforms"])

@router.get("/platforms")
def api_list_platforms(user = Depends(require_scope("read")), db: Session = Depends(get_db)):
    return list_platforms(db, user)

@router.post("/platforms/{platform}/connect")
def api_connect(
    platform: str,
    credentials: dict[str, Any] | None = Body(default=None),
    user = Depends(require_scope("write")),
    db: Session = Depends(get_db),
):
    return connect(db, user, platform, credentials or {})

@router.post("/platforms/{platform}/disconnect")
def api_disconnect(platform: str, user = Depends(require_scope("write")), db: Session = Depends(get_db)):
    return disconnect(db, user, platform)

@router.get("/trending")
async def api_trending(
    platform: str = Query("producthunt"),
    period: Literal["day", "week", "month"] = Query("day"),
    limit: int = Query(10, ge=1, le=50),
    user = Depends(require_scope("read")),
    db: Session = Depends(get_db),
):
    return await trending(db, user, platform, period, limit)
