from fakes import charge_success_body, sign

CUSTOMER = {"email": "a@b.com", "firstName": "A", "lastName": "B", "phone": "123"}
PIZZA = {"id": "x", "name": "Pizza", "price": 10, "quantity": 2}


def place_order(client, email="a@b.com", total=20, order_type="food"):
    response = client.post("/api/orders", json={
        "customerData": {**CUSTOMER, "email": email},
        "type": order_type,
        "items": [PIZZA],
        "totalAmount": total,
    })
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["success"] is True


def test_create_customer_is_get_or_create(client):
    first = client.post("/api/customers", json=CUSTOMER)
    second = client.post("/api/customers", json={**CUSTOMER, "email": "A@B.com", "firstName": "Other"})

    assert first.status_code == second.status_code == 201
    assert second.json()["customer"]["id"] == first.json()["customer"]["id"]
    assert second.json()["customer"]["firstName"] == "A"


def test_invalid_customer_is_400_with_envelope(client):
    response = client.post("/api/customers", json={"email": "not-an-email"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["details"]


def test_create_order_scenario(client):
    body = place_order(client)

    order = body["order"]
    assert body["orderCode"] == order["orderCode"]
    assert order["orderCode"].startswith("PH")
    assert (order["status"], order["paymentStatus"]) == ("pending", "pending")
    assert order["totalAmount"] == 20
    assert order["customer"]["email"] == "a@b.com"


def test_create_order_rejects_unknown_type(client):
    response = client.post("/api/orders", json={
        "customerData": CUSTOMER, "type": "spa", "items": [PIZZA], "totalAmount": 20,
    })

    assert response.status_code == 400


def test_payment_round_trip_via_verify(client, gateway):
    order = place_order(client)["order"]

    init = client.post("/api/payments/initialize", json={"orderId": order["id"]})
    assert init.status_code == 200
    reference = init.json()["reference"]
    assert init.json()["authorization_url"].endswith(reference)

    gateway.transactions[reference] = ("success", 2000)
    verify = client.post("/api/payments/verify", json={"reference": reference})
    assert verify.json() == {"success": True, "status": "success", "amount": 20.0, "reference": reference}

    tracked = client.get(f"/api/orders/track/{order['orderCode']}").json()["order"]
    assert (tracked["status"], tracked["paymentStatus"]) == ("paid", "success")
    assert tracked["paymentReference"] == reference


def test_initialize_unknown_order_is_404(client):
    response = client.post("/api/payments/initialize", json={"orderId": 4242})

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Order not found"}


def test_gateway_error_is_500_with_details(client, gateway):
    from hotel_orders.core.errors import UpstreamGatewayError

    gateway.error = UpstreamGatewayError("Payment verification failed", details="Invalid key")
    response = client.post("/api/payments/verify", json={"reference": "ref"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Payment verification failed", "details": "Invalid key"}


def test_webhook_acknowledges_and_applies(client):
    order = place_order(client)["order"]
    reference = client.post("/api/payments/initialize", json={"orderId": order["id"]}).json()["reference"]
    body = charge_success_body(reference)

    response = client.post(
        "/api/webhooks/paystack",
        content=body,
        headers={"x-paystack-signature": sign(body), "content-type": "application/json"},
    )

    assert response.status_code == 200
    assert response.text == "OK"
    tracked = client.get(f"/api/orders/track/{order['orderCode']}").json()["order"]
    assert tracked["paymentStatus"] == "success"


def test_webhook_with_bad_signature_is_acknowledged_but_ignored(client):
    order = place_order(client)["order"]
    reference = client.post("/api/payments/initialize", json={"orderId": order["id"]}).json()["reference"]
    body = charge_success_body(reference)

    response = client.post("/api/webhooks/paystack", content=body, headers={"x-paystack-signature": "forged"})

    assert response.status_code == 200
    tracked = client.get(f"/api/orders/track/{order['orderCode']}").json()["order"]
    assert tracked["paymentStatus"] == "pending"


def test_webhook_internal_failure_is_500(client, reconciler, monkeypatch):
    def explode(raw_body, signature):
        raise RuntimeError("database on fire")

    monkeypatch.setattr(reconciler, "handle_webhook", explode)

    response = client.post("/api/webhooks/paystack", content=b"{}", headers={"x-paystack-signature": "x"})

    assert response.status_code == 500


def test_orders_by_email(client):
    place_order(client, email="guest@hotel.com")

    found = client.get("/api/orders/customer/GUEST@hotel.com")
    missing = client.get("/api/orders/customer/nobody@hotel.com")

    assert found.status_code == 200
    assert len(found.json()["orders"]) == 1
    assert found.json()["customer"]["email"] == "guest@hotel.com"
    assert missing.status_code == 404


def test_track_unknown_code_is_404(client):
    assert client.get("/api/orders/track/PH000000NOPE").status_code == 404


def test_verify_order_ownership_statuses(client):
    code = place_order(client, email="a@x.com")["orderCode"]

    ok = client.post("/api/orders/verify", json={"email": "A@x.com", "orderCode": code})
    mismatch = client.post("/api/orders/verify", json={"email": "b@x.com", "orderCode": code})
    missing = client.post("/api/orders/verify", json={"email": "a@x.com", "orderCode": "PH000000NOPE"})
    no_email = client.post("/api/orders/verify", json={"orderCode": code})
    blank_email = client.post("/api/orders/verify", json={"email": "   ", "orderCode": code})

    assert ok.status_code == 200
    assert ok.json()["order"]["orderCode"] == code
    assert mismatch.status_code == 403
    assert missing.status_code == 404
    assert no_email.status_code == 400
    assert no_email.json()["error"] == "Email address is required"
    assert blank_email.status_code == 400
    assert blank_email.json()["error"] == "Email address is required"


def test_verify_order_without_code_lists_orders(client):
    place_order(client, email="a@x.com")
    place_order(client, email="a@x.com", order_type="room", total=90)

    response = client.post("/api/orders/verify", json={"email": "a@x.com"})

    assert response.status_code == 200
    assert [o["type"] for o in response.json()["orders"]] == ["room", "food"]


def test_admin_confirm_and_cancel(client, gateway):
    order = place_order(client)["order"]
    code = order["orderCode"]

    early = client.post(f"/api/admin/orders/{code}/confirm")
    assert early.status_code == 409

    reference = client.post("/api/payments/initialize", json={"orderId": order["id"]}).json()["reference"]
    gateway.transactions[reference] = ("success", 2000)
    client.post("/api/payments/verify", json={"reference": reference})

    confirmed = client.post(f"/api/admin/orders/{code}/confirm")
    assert confirmed.status_code == 200
    assert confirmed.json()["order"]["status"] == "confirmed"

    cancelled = client.post(f"/api/admin/orders/{code}/cancel")
    assert cancelled.json()["order"]["status"] == "cancelled"
    assert cancelled.json()["order"]["paymentStatus"] == "success"
    assert client.post(f"/api/admin/orders/{code}/cancel").status_code == 409
