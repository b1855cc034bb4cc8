from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from launchpal.shared.db import get_db
from launchpal.shared.auth import require_scope
from launchpal.usage.service import usage_stats

router = APIRouter(prefix="/api", tags=["Usage"])

@router.get("/usage")
def my_usage(
    startDate: datetime | None = Query(None, description="Inclusive start; defaults to the 1st of this month"),
    endDate: datetime | None = Query(None, description="Exclusive end; defaults to now"),
    user = Depends(require_scope("read")),
    db: Session = Depends(get_db),
):
    stats = usage_stats(db, user, startDate, endDate)
    if stats["end"] is not None and stats["end"] <= stats["start"]:
        raise HTTPException(400, "endDate must be after startDate")
    # remaining is always against the monthly quota, whatever the window
    month = usage_stats(db, user) if (startDate or endDate) else stats
    return {
        "startDate": stats["start"],
        "endDate": stats["end"],
        "totalRequests": stats["total_requests"],
        "totalCost": stats["total_cost"],
        "entries": stats["entries"],
        "remaining": max(user.monthly_requests - month["total_requests"], 0),
        "subscription": user.subscription,
        "limits": {
            "monthlyRequests": user.monthly_requests,
            "platforms": user.platform_limit,
            "products": user.product_limit,
        },
    }
