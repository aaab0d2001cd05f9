from tests.helpers import make_event, sign


def test_full_checkout_lifecycle_integration(client, store, count_orders, mocker):
    """
    Test the full lifecycle:
    1. Create checkout session (API -> Stripe Mocked)
    2. Webhook success (Stripe -> API -> DB)
    3. Webhook redelivery (no second order)
    4. Success page fetches session details (API -> Stripe Mocked)
    """

    # --- 1. CREATE CHECKOUT SESSION ---
    mocker.patch(
        "stripe.checkout.Session.create",
        return_value={"id": "sess_1", "url": "https://checkout.stripe.com/c/pay/sess_1"},
    )

    response = client.post(
        "/create-checkout-session",
        json={"items": [{"name": "Book", "price": 100, "quantity": 2}]}
    )

    assert response.status_code == 200
    assert response.json()["session_id"] == "sess_1"

    # --- 2. WEBHOOK SUCCESS ---
    payload = make_event(
        id="sess_1",
        amount_total=20000,
        customer_details={"email": "a@b.com", "name": "Ada Ardor", "phone": None},
        collected_information={
            "shipping_details": {
                "name": "Ada Ardor",
                "address": {"line1": "Nørregade 1", "line2": None, "city": "København",
                            "postal_code": "1165", "country": "DK"},
            },
        },
        line_items={"object": "list", "data": [{"description": "Book", "quantity": 2, "amount_total": 20000}]},
    )

    webhook_response = client.post(
        "/webhook",
        content=payload,
        headers={"stripe-signature": sign(payload)}
    )

    assert webhook_response.status_code == 200
    assert webhook_response.json() == {"received": True}

    order = store.find_by_external_reference("sess_1")
    assert order.email == "a@b.com"
    assert order.total == 20000
    assert order.line2 == ""
    assert order.phone == ""

    # --- 3. REDELIVERY ---
    redelivery = client.post(
        "/webhook",
        content=payload,
        headers={"stripe-signature": sign(payload)}
    )

    assert redelivery.status_code == 200
    assert count_orders(session_id="sess_1") == 1

    # --- 4. SESSION DETAILS ---
    mocker.patch(
        "stripe.checkout.Session.retrieve",
        return_value={"id": "sess_1", "payment_status": "paid"},
    )

    detail = client.get("/checkout-session?session_id=sess_1")

    assert detail.status_code == 200
    assert detail.json()["payment_status"] == "paid"


def test_different_sessions_create_separate_orders(client, count_orders):
    for session_id in ("sess_a", "sess_b"):
        payload = make_event(id=session_id, amount_total=1000, line_items=[])
        response = client.post("/webhook", content=payload, headers={"stripe-signature": sign(payload)})
        assert response.status_code == 200

    assert count_orders() == 2
