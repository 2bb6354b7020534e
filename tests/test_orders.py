from decimal import Decimal

from shopapi import crud

ADDRESS = {
    "firstName": "Pat",
    "lastName": "Lee",
    "address1": "1 Market Street",
    "city": "San Francisco",
    "state": "CA",
    "zip": "94105",
    "phone": "4155550100",
}


def order_payload(catalogue, items=None, **order):
    trail, road, jacket, lamp = catalogue["products"]
    standard, express = catalogue["shipping_types"]
    body = {
        "billing": ADDRESS,
        "shipping": ADDRESS,
        "shippingTypeId": standard,
        "orderTax": "19.16",
        # client-side prices are not trusted
        "orderProducts": items if items is not None else [
            {"productId": trail, "qty": 2, "unitPrice": 1},
            {"productId": jacket, "qty": 1, "unitPrice": 1},
        ],
    }
    body.update(order)
    return {"order": body}


def test_create_order_snapshots_prices(client, catalogue, make_user, auth_header):
    user = make_user()
    r = client.post("/api/orders/create", json=order_payload(catalogue), headers=auth_header(user.id))
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["data"]["productsAdded"] == 2

    order = body["data"]["order"]
    assert order["userId"] == user.id
    assert Decimal(order["orderSubTotal"]) == Decimal("239.48")
    assert Decimal(order["orderShippingCost"]) == Decimal("5.00")
    assert Decimal(order["orderTax"]) == Decimal("19.16")
    assert Decimal(order["orderTotal"]) == Decimal("263.64")
    assert Decimal(order["orderProducts"][0]["unitPrice"]) == Decimal("89.99")
    assert order["billing"]["city"] == "San Francisco"


def test_orders_are_listed_for_owner_only(client, catalogue, make_user, auth_header):
    owner = make_user()
    other = make_user(email="other@example.com")
    created = client.post("/api/orders/create", json=order_payload(catalogue), headers=auth_header(owner.id))
    order_id = created.json()["data"]["order"]["id"]

    r = client.get("/api/orders", headers=auth_header(owner.id))
    assert [o["id"] for o in r.json()["data"]["orders"]] == [order_id]
    r = client.get(f"/api/orders/{order_id}", headers=auth_header(owner.id))
    assert r.status_code == 200

    assert client.get("/api/orders", headers=auth_header(other.id)).json()["data"]["orders"] == []
    assert client.get(f"/api/orders/{order_id}", headers=auth_header(other.id)).status_code == 404


def test_order_requires_token(client, catalogue):
    r = client.post("/api/orders/create", json=order_payload(catalogue))
    assert r.status_code == 401
    assert r.json()["detail"] == "No token provided"


def test_order_for_other_user_is_forbidden(client, catalogue, make_user, auth_header):
    user = make_user()
    payload = order_payload(catalogue)
    payload["userId"] = user.id + 100
    r = client.post("/api/orders/create", json=payload, headers=auth_header(user.id))
    assert r.status_code == 403


def test_unknown_product_or_shipping_type(client, catalogue, make_user, auth_header, db_session):
    user = make_user()
    r = client.post(
        "/api/orders/create",
        json=order_payload(catalogue, items=[{"productId": 9999, "qty": 1}]),
        headers=auth_header(user.id),
    )
    assert r.status_code == 400
    assert "unknown product" in r.json()["detail"]

    r = client.post(
        "/api/orders/create", json=order_payload(catalogue, shippingTypeId=9999), headers=auth_header(user.id)
    )
    assert r.status_code == 400
    assert crud.list_orders_for_user(db_session, user.id) == []


def test_out_of_stock_product_is_rejected(client, catalogue, make_user, auth_header):
    user = make_user()
    lamp = catalogue["products"][3]
    r = client.post(
        "/api/orders/create",
        json=order_payload(catalogue, items=[{"productId": lamp, "qty": 1}]),
        headers=auth_header(user.id),
    )
    assert r.status_code == 400
    assert "out of stock" in r.json()["detail"]


def test_invalid_order_payloads(client, catalogue, make_user, auth_header):
    user = make_user()
    headers = auth_header(user.id)
    bad = [
        order_payload(catalogue, items=[]),
        order_payload(catalogue, items=[{"productId": catalogue["products"][0], "qty": 0}]),
        order_payload(catalogue, orderTax="-1"),
        order_payload(catalogue, billing=dict(ADDRESS, phone="123")),
    ]
    for payload in bad:
        r = client.post("/api/orders/create", json=payload, headers=headers)
        assert r.status_code == 400, payload


def test_amount_rounding_regression():
    # Guard against regressions: 2-decimal rounding half up
    assert crud.round_amount(Decimal("2.675")) == Decimal("2.68")
    assert crud.round_amount(Decimal("10.125")) == Decimal("10.13")
