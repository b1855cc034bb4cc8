import hmac
from typing import Any, Literal

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from launchpal.shared.db import get_db
from launchpal.shared.auth import get_user, require_scope
from launchpal.shared.config import settings
from launchpal.billing.service import (
    PLANS,
    create_checkout_session,
    handle_webhook,
    get_subscription,
    cancel_subscription,
)

router = APIRouter(prefix="/billing", tags=["Billing"])

class CheckoutIn(BaseModel):
    plan: Literal["starter", "pro"]
    interval: Literal["monthly", "yearly"] = "monthly"

class WebhookIn(BaseModel):
    event: str
    data: dict[str, Any] = Field(default_factory=dict)

@router.get("/plans")
def list_plans():
    return {"items": [{"id": k, "limits": v} for k, v in PLANS.items()]}

@router.post("/checkout")
def api_checkout(inb: CheckoutIn, user = Depends(require_scope("write"))):
    return create_checkout_session(user, inb.plan, inb.interval)

@router.get("/subscription")
def api_subscription(user = Depends(get_user)):
    return get_subscription(user)

@router.post("/cancel")
def api_cancel(user = Depends(require_scope("write")), db: Session = Depends(get_db)):
    return cancel_subscription(db, user)

@router.post("/webhook")
def api_webhook(
    inb: WebhookIn,
    db: Session = Depends(get_db),
    secret: str | None = Header(default=None, alias="X-Webhook-Secret"),
):
    if settings.BILLING_WEBHOOK_SECRET and not hmac.compare_digest(secret or "", settings.BILLING_WEBHOOK_SECRET):
        raise HTTPException(401, "invalid webhook secret")
    try:
        return handle_webhook(db, inb.event, inb.data)
    except ValueError as e:
        raise HTTPException(400, str(e))
