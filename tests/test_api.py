import json
from datetime import timedelta

from sqlmodel import select

from storefront.core.exceptions import GatewayError
from storefront.models.coupon import Coupon
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.utils.clock import utcnow


def test_root(anon_client):
    assert anon_client.get("/").status_code == 200


def test_create_order(client, gateway):
    response = client.post("/api/v1/payments/create-order", json={
        "products": [{"id": 1, "price": 1500.00, "quantity": 2}],
    })

    assert response.status_code == 200
    body = response.json()
    assert body["amount"] == 300000
    assert body["totalAmount"] == 3000.0
    assert body["currency"] == "INR"
    assert body["key"] == gateway.key_id
    assert body["orderId"] in gateway.orders


def test_create_order_accepts_null_quantity(client, gateway):
    response = client.post("/api/v1/payments/create-order", json={
        "products": [{"id": 1, "price": 100, "quantity": None}],
    })

    assert response.status_code == 200
    assert response.json()["amount"] == 10000
    notes = gateway.orders[response.json()["orderId"]]["notes"]
    assert json.loads(notes["products"]) == [{"id": 1, "quantity": 1, "price": 100.0}]


def test_create_order_rejects_zero_quantity(client, gateway):
    response = client.post("/api/v1/payments/create-order", json={
        "products": [{"id": 1, "price": 100, "quantity": 0}],
    })

    assert response.status_code == 422
    assert gateway.calls == []


def test_create_order_rejects_empty_products(client, gateway):
    for payload in ({"products": []}, {}):
        response = client.post("/api/v1/payments/create-order", json=payload)
        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid or empty products array"}
    assert gateway.calls == []


def test_create_order_gateway_failure(client, gateway):
    gateway.fail_with = GatewayError("Payment gateway failed to create order", error="Authentication failed")

    response = client.post("/api/v1/payments/create-order", json={"products": [{"id": 1, "price": 10}]})

    assert response.status_code == 502
    assert response.json() == {
        "detail": "Payment gateway failed to create order",
        "error": "Authentication failed",
    }


def test_verify_payment_twice(client, session, user, checkout):
    payment_id, order_id, signature = checkout(user, [{"id": 1, "price": 120}])
    payload = {
        "razorpay_payment_id": payment_id,
        "razorpay_order_id": order_id,
        "razorpay_signature": signature,
    }

    first = client.post("/api/v1/payments/verify-payment", json=payload)
    second = client.post("/api/v1/payments/verify-payment", json=payload)

    assert first.status_code == 200
    assert second.status_code == 200
    assert first.json()["success"] is True
    assert second.json()["orderId"] == first.json()["orderId"]
    assert len(session.exec(select(Order)).all()) == 1


def test_verify_payment_invalid_signature(client, user, checkout):
    payment_id, order_id, _ = checkout(user, [{"id": 1, "price": 120}])

    response = client.post("/api/v1/payments/verify-payment", json={
        "razorpay_payment_id": payment_id,
        "razorpay_order_id": order_id,
        "razorpay_signature": "0" * 64,
    })

    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid payment signature"}


def test_verify_payment_not_captured(client, user, checkout):
    payment_id, order_id, signature = checkout(user, [{"id": 1, "price": 120}], status="failed")

    response = client.post("/api/v1/payments/verify-payment", json={
        "razorpay_payment_id": payment_id,
        "razorpay_order_id": order_id,
        "razorpay_signature": signature,
    })

    assert response.status_code == 400
    assert response.json() == {"detail": "Payment not completed"}


def test_get_coupon(client, session, user):
    assert client.get("/api/v1/coupons/").json() is None

    session.add(Coupon(code="SAVE10", discount_percentage=10,
                       expiration_date=utcnow() + timedelta(days=3), user_id=user.id))
    session.commit()

    body = client.get("/api/v1/coupons/").json()
    assert body["code"] == "SAVE10"
    assert body["discount_percentage"] == 10
    assert body["is_active"] is True


def test_validate_coupon(client, session, user):
    session.add(Coupon(code="SAVE10", discount_percentage=10,
                       expiration_date=utcnow() + timedelta(days=3), user_id=user.id))
    session.commit()

    ok = client.post("/api/v1/coupons/validate", json={"code": "SAVE10"})
    assert ok.status_code == 200
    assert ok.json() == {"message": "Coupon is valid", "code": "SAVE10", "discountPercentage": 10}

    missing = client.post("/api/v1/coupons/validate", json={"code": "OTHER"})
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Coupon not found"}


def test_gift_coupon_endpoint_requires_superuser(client, user):
    response = client.post("/api/v1/coupons/gift", json={"user_id": user.id})
    assert response.status_code == 403


def test_gift_coupon_endpoint(admin_client, session, user):
    response = admin_client.post("/api/v1/coupons/gift", json={"user_id": user.id})

    assert response.status_code == 200
    assert response.json()["code"].startswith("GIFT")
    assert len(session.exec(select(Coupon).where(Coupon.user_id == user.id)).all()) == 1

    assert admin_client.post("/api/v1/coupons/gift", json={"user_id": 9999}).status_code == 404


def test_analytics_requires_superuser(client):
    assert client.get("/api/v1/analytics/").status_code == 403


def test_analytics(admin_client, user, checkout):
    payment_id, order_id, signature = checkout(user, [{"id": 1, "price": 75}])
    admin_client.post("/api/v1/payments/verify-payment", json={
        "razorpay_payment_id": payment_id,
        "razorpay_order_id": order_id,
        "razorpay_signature": signature,
    })

    response = admin_client.get("/api/v1/analytics/", params={"days": 3})

    assert response.status_code == 200
    body = response.json()
    assert body["analyticsData"] == {"users": 2, "products": 0, "totalSales": 1, "totalRevenue": 75.0}
    assert len(body["dailySalesData"]) == 3
    assert body["dailySalesData"][-1]["sales"] == 1


def test_products(anon_client, session):
    session.add(Product(name="Canvas Tote", slug="canvas-tote", description="Sturdy tote", price=349.5))
    session.add(Product(name="Hidden", slug="hidden", description="Retired", price=1, is_active=False))
    session.commit()

    listed = anon_client.get("/api/v1/products/").json()
    assert [p["slug"] for p in listed] == ["canvas-tote"]
    assert anon_client.get("/api/v1/products/", params={"q": "tote"}).json()[0]["price"] == 349.5
    assert anon_client.get(f"/api/v1/products/{listed[0]['id']}").status_code == 200


def test_register_login_and_checkout(anon_client, gateway):
    register = anon_client.post("/api/v1/auth/register", json={
        "email": "new@example.com", "password": "s3cret-pass", "name": "New Shopper"
    })
    assert register.status_code == 200
    assert "password_hash" not in register.json()

    duplicate = anon_client.post("/api/v1/auth/register", json={"email": "new@example.com", "password": "x"})
    assert duplicate.status_code == 400

    bad = anon_client.post("/api/v1/auth/token", data={"username": "new@example.com", "password": "wrong"})
    assert bad.status_code == 401

    token = anon_client.post("/api/v1/auth/token", data={
        "username": "new@example.com", "password": "s3cret-pass"
    }).json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    assert anon_client.get("/api/v1/auth/me", headers=headers).json()["email"] == "new@example.com"
    response = anon_client.post("/api/v1/payments/create-order", headers=headers,
                                json={"products": [{"id": 1, "price": 10}]})
    assert response.status_code == 200
    assert anon_client.post("/api/v1/payments/create-order", json={"products": []}).status_code == 401
