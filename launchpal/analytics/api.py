from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from launchpal.shared.db import get_db
from launchpal.shared.auth import require_scope
from launchpal.products.service import get_product
from launchpal.analytics.service import launch_checklist, launch_strategy, optimal_launch_time

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])

Audience = Literal["US", "EU", "ASIA", "GLOBAL"]

@router.get("/timing")
def api_optimal_timing(audience: Audience = Query("GLOBAL"), user = Depends(require_scope("read"))):
    return optimal_launch_time(audience)

@router.get("/checklist")
def api_checklist(user = Depends(require_scope("read"))):
    return {"items": launch_checklist()}

@router.get("/strategy/{product_id}")
def api_strategy(
    product_id: str,
    audience: Audience = Query("GLOBAL"),
    user = Depends(require_scope("read")),
    db: Session = Depends(get_db),
):
    return launch_strategy(get_product(db, user.id, product_id), audience)
