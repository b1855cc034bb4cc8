import pytest

from launchpal.shared.config import settings


def _webhook(client, event, **data):
    return client.post("/billing/webhook", json={"event": event, "data": data})


def test_plans(client):
    items = {p["id"]: p["limits"] for p in client.get("/billing/plans").json()["items"]}
    assert items["free"]["monthly_requests"] == 100
    assert items["starter"]["monthly_requests"] == 1000
    assert items["pro"]["monthly_requests"] == 10000


@pytest.mark.parametrize("product_id,plan,monthly", [("prod_starter_m", "starter", 1000), ("prod_pro_y", "pro", 10000)])
def test_webhook_upgrades_plan(client, auth, product_id, plan, monthly):
    headers, user = auth
    r = _webhook(client, "subscription.created", customer_email=user["email"], product_id=product_id, customer_id="cus_1")
    assert r.json() == {"success": True, "applied": plan}

    sub = client.get("/billing/subscription", headers=headers).json()
    assert sub["plan"] == plan
    assert sub["customerId"] == "cus_1"
    assert sub["limits"]["monthly_requests"] == monthly

    usage = client.get("/api/usage", headers=headers).json()
    assert usage["subscription"] == plan


def test_cancel_webhook_restores_free_limits(client, auth):
    headers, user = auth
    _webhook(client, "subscription.updated", customer_email=user["email"], product_id="prod_pro")
    r = _webhook(client, "subscription.cancelled", customer_email=user["email"])
    assert r.json()["applied"] == "free"
    sub = client.get("/billing/subscription", headers=headers).json()
    assert sub["plan"] == "free"
    assert sub["limits"] == {"monthly_requests": 100, "platforms": 1, "products": 3}


def test_unknown_event_is_ignored(client):
    assert _webhook(client, "invoice.paid").json() == {"success": True, "applied": None}


def test_webhook_for_unknown_customer(client):
    r = _webhook(client, "subscription.created", customer_email="ghost@example.com", product_id="prod_pro")
    assert r.status_code == 404


def test_webhook_secret(client, auth, monkeypatch):
    monkeypatch.setattr(settings, "BILLING_WEBHOOK_SECRET", "whsec")
    _, user = auth
    r = _webhook(client, "subscription.created", customer_email=user["email"], product_id="prod_pro")
    assert r.status_code == 401

    r = client.post(
        "/billing/webhook",
        json={"event": "subscription.created", "data": {"customer_email": user["email"], "product_id": "prod_pro"}},
        headers={"X-Webhook-Secret": "whsec"},
    )
    assert r.status_code == 200


def test_checkout_and_cancel(client, auth):
    headers, user = auth
    r = client.post("/billing/checkout", json={"plan": "pro", "interval": "yearly"}, headers=headers)
    url = r.json()["checkoutUrl"]
    assert "plan=pro" in url and f"client_reference_id={user['id']}" in url

    _webhook(client, "subscription.created", customer_email=user["email"], product_id="prod_pro")
    assert client.post("/billing/cancel", headers=headers).json() == {"success": True}
    assert client.get("/billing/subscription", headers=headers).json()["plan"] == "free"
