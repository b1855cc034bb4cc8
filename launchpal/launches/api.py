from typing import Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from launchpal.shared.db import get_db
from launchpal.shared.auth import require_scope
from launchpal.launches.schemas import (
    LaunchCreate,
    LaunchStatusUpdate,
    LaunchScheduled,
    LaunchOut,
    LaunchMetricsOut,
    LaunchStatus,
)
from launchpal.launches.service import (
    schedule_launch,
    list_launches,
    get_launch,
    update_status,
    cancel_launch,
    get_launch_metrics,
)
from launchpal.products.service import get_product
from launchpal.analytics.service import (
    SqlMetricsStore,
    export_metrics,
    generate_report,
    optimal_launch_time,
    predict_performance,
)

router = APIRouter(prefix="/api/launches", tags=["Launches"])

@router.post("", response_model=LaunchScheduled, status_code=201)
async def api_schedule_launch(payload: LaunchCreate, user = Depends(require_scope("write")), db: Session = Depends(get_db)):
    launch = await schedule_launch(db, user, payload)
    return {"id": launch.id, "status": launch.status, "scheduledAt": launch.scheduled_at}

@router.get("", response_model=list[LaunchOut])
def api_list_launches(
    status: LaunchStatus | None = Query(None),
    user = Depends(require_scope("read")),
    db: Session = Depends(get_db),
):
    return list_launches(db, user.id, status)

@router.get("/{launch_id}", response_model=LaunchOut)
def api_get_launch(launch_id: str, user = Depends(require_scope("read")), db: Session = Depends(get_db)):
    return get_launch(db, user.id, launch_id)

@router.patch("/{launch_id}/status", response_model=LaunchOut)
def api_update_status(launch_id: str, payload: LaunchStatusUpdate, user = Depends(require_scope("write")), db: Session = Depends(get_db)):
    return update_status(db, user.id, launch_id, payload.status)

@router.post("/{launch_id}/cancel", response_model=LaunchOut)
def api_cancel_launch(launch_id: str, user = Depends(require_scope("write")), db: Session = Depends(get_db)):
    return cancel_launch(db, user.id, launch_id)

@router.get("/{launch_id}/metrics", response_model=LaunchMetricsOut)
async def api_launch_metrics(launch_id: str, user = Depends(require_scope("read")), db: Session = Depends(get_db)):
    return await get_launch_metrics(db, user, launch_id)

@router.get("/{launch_id}/analytics")
def api_launch_analytics(
    launch_id: str,
    hoursAhead: int = Query(24, ge=1, le=168),
    audience: Literal["US", "EU", "ASIA", "GLOBAL"] = Query("GLOBAL"),
    user = Depends(require_scope("read")),
    db: Session = Depends(get_db),
):
    launch = get_launch(db, user.id, launch_id)
    product = get_product(db, user.id, launch.product_id)
    history = SqlMetricsStore(db).history(user.id, product.id)
    return {
        "report": generate_report(product, history),
        "prediction": predict_performance(history, hoursAhead),
        "optimalTiming": optimal_launch_time(audience),
    }

@router.get("/{launch_id}/analytics/export", response_class=PlainTextResponse)
def api_export_analytics(
    launch_id: str,
    format: Literal["json", "csv"] = Query("json"),
    user = Depends(require_scope("read")),
    db: Session = Depends(get_db),
):
    launch = get_launch(db, user.id, launch_id)
    history = SqlMetricsStore(db).history(user.id, launch.product_id)
    media_type = "text/csv" if format == "csv" else "application/json"
    return PlainTextResponse(export_metrics(history, format), media_type=media_type)
