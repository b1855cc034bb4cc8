def test_create_returns_platform_ids(client, product, fake_ph):
    assert product["platformId"] == "post_1"
    assert product["url"] == "https://www.producthunt.com/posts/product-1"
    assert fake_ph.created[0].name == "Shipit"


def test_get_and_list(client, connected, product):
    r = client.get(f"/api/products/{product['id']}", headers=connected)
    assert r.status_code == 200
    body = r.json()
    assert body["platform"] == "producthunt"
    assert body["topics"] == ["productivity"]

    assert len(client.get("/api/products", headers=connected).json()) == 1
    assert client.get("/api/products", params={"platform": "reddit"}, headers=connected).json() == []


def test_other_users_product_is_not_found(client, product, other_auth):
    headers, _ = other_auth
    assert client.get(f"/api/products/{product['id']}", headers=headers).status_code == 404
    assert client.delete(f"/api/products/{product['id']}", headers=headers).status_code == 404


def test_update_changes_content_but_not_platform(client, connected, product):
    r = client.patch(
        f"/api/products/{product['id']}",
        json={"tagline": "Launch day, handled", "platform": "reddit", "platform_id": "hijack"},
        headers=connected,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["tagline"] == "Launch day, handled"
    assert body["platform"] == "producthunt"
    assert body["platform_id"] == "post_1"


def test_delete_without_launches(client, connected, product):
    r = client.delete(f"/api/products/{product['id']}", headers=connected)
    assert r.status_code == 204
    assert client.get(f"/api/products/{product['id']}", headers=connected).status_code == 404


def test_delete_with_launch_is_refused(client, connected, product):
    r = client.post(
        "/api/launches",
        json={"productId": product["id"], "scheduledAt": "2030-01-07T08:01:00Z"},
        headers=connected,
    )
    assert r.status_code == 201

    r = client.delete(f"/api/products/{product['id']}", headers=connected)
    assert r.status_code == 409
    assert r.json()["code"] == "product_has_launches"
    assert client.get(f"/api/products/{product['id']}", headers=connected).status_code == 200


def test_unsupported_platform_on_create(client, auth, fake_ph):
    headers, _ = auth
    r = client.post(
        "/api/products",
        json={"platform": "hackernews", "name": "X", "tagline": "Y", "website": "https://x.example.com"},
        headers=headers,
    )
    # no credential row for hackernews, so the connection check fails first
    assert r.status_code == 400
    assert r.json()["code"] == "platform_not_connected"
