from urllib.parse import urlencode

from sqlalchemy.orm import Session

from launchpal.auth.models import User
from launchpal.shared.config import settings
from launchpal.shared.errors import NotFound
from launchpal.shared.logging import get_logger

logger = get_logger("billing")

PLANS: dict[str, dict] = {
    "free": {"monthly_requests": 100, "platforms": 1, "products": 3},
    "starter": {"monthly_requests": 1000, "platforms": 3, "products": 10},
    "pro": {"monthly_requests": 10000, "platforms": 999, "products": 999},
}

def update_subscription(
    db: Session,
    subscription: str,
    user_id: str | None = None,
    email: str | None = None,
    customer_id: str | None = None,
) -> User:
    """The only place user limits are written."""
    if subscription not in PLANS:
        raise ValueError(f"unknown plan: {subscription}")
    if user_id:
        user = db.get(User, user_id)
    elif email:
        user = db.query(User).filter(User.email == email.lower().strip()).first()
    else:
        raise ValueError("Either user_id or email must be provided")
    if not user:
        raise NotFound("User not found")

    limits = PLANS[subscription]
    user.subscription = subscription
    user.monthly_requests = limits["monthly_requests"]
    user.platform_limit = limits["platforms"]
    user.product_limit = limits["products"]
    if customer_id:
        user.customer_id = customer_id
    db.commit()
    db.refresh(user)
    logger.info(f"subscription set to {subscription}", extra={"user_id": user.id})
    return user

def create_checkout_session(user: User, plan: str, interval: str) -> dict:
    # hosted checkout lives at the payment provider
    query = urlencode({"plan": plan, "interval": interval, "client_reference_id": user.id})
    return {"checkoutUrl": f"{settings.BILLING_CHECKOUT_URL}?{query}"}

def handle_webhook(db: Session, event: str, data: dict) -> dict:
    """
    Applies payment-provider subscription events.
    Unknown events are acknowledged and ignored.
    """
    if event in ("subscription.created", "subscription.updated"):
        product_id = data.get("product_id") or ""
        plan = "starter" if "starter" in product_id else "pro"
        update_subscription(
            db, plan, email=data.get("customer_email"), customer_id=data.get("customer_id")
        )
        return {"success": True, "applied": plan}
    if event == "subscription.cancelled":
        update_subscription(db, "free", email=data.get("customer_email"))
        return {"success": True, "applied": "free"}
    logger.info(f"ignoring billing event {event}")
    return {"success": True, "applied": None}

def get_subscription(user: User) -> dict:
    return {"plan": user.subscription, "limits": user.limits, "customerId": user.customer_id}

def cancel_subscription(db: Session, user: User) -> dict:
    update_subscription(db, "free", user_id=user.id)
    return {"success": True}
