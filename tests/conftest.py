import hashlib
import hmac

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from storefront.core.config import settings
from storefront.core.exceptions import GatewayError
from storefront.db.session import get_session
from storefront.main import app
from storefront.models import User
from storefront.routers.auth import get_current_user
from storefront.routers.payment import CheckoutItem, get_gateway
from storefront.services.checkout import CheckoutService
from storefront.services.gateway import PaymentGateway


class FakeGateway(PaymentGateway):
    """In-memory stand-in for Razorpay with the same entity shapes."""

    key_id = "rzp_test_fake"

    def __init__(self):
        self.orders = {}
        self.payments = {}
        self.calls = []
        self.fail_with = None
        self._seq = 0

    def create_order(self, amount, currency, receipt, notes):
        self.calls.append(("create_order", amount))
        if self.fail_with:
            raise self.fail_with
        self._seq += 1
        order = {
            "id": f"order_Test{self._seq:04d}",
            "entity": "order",
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes,
            "status": "created",
        }
        self.orders[order["id"]] = order
        return order

    @staticmethod
    def sign(order_id, payment_id, secret):
        # What Razorpay posts back to the browser after a successful checkout
        return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()

    def pay(self, order_id, status="captured"):
        payment_id = f"pay_Test{len(self.payments) + 1:04d}"
        self.payments[payment_id] = {"id": payment_id, "order_id": order_id, "status": status}
        return payment_id

    def fetch_payment(self, payment_id):
        self.calls.append(("fetch_payment", payment_id))
        if payment_id not in self.payments:
            raise GatewayError("Payment gateway failed to fetch payment", error="The id provided does not exist")
        return self.payments[payment_id]

    def fetch_order(self, order_id):
        self.calls.append(("fetch_order", order_id))
        if order_id not in self.orders:
            raise GatewayError("Payment gateway failed to fetch order", error="The id provided does not exist")
        return self.orders[order_id]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def user(session):
    user = User(email="shopper@example.com", name="Shopper", password_hash="not-used")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def admin(session):
    admin = User(email="admin@example.com", name="Admin", password_hash="not-used", is_superuser=True)
    session.add(admin)
    session.commit()
    session.refresh(admin)
    return admin


@pytest.fixture
def secret():
    return settings.RAZORPAY_KEY_SECRET


@pytest.fixture
def checkout(session, gateway):
    """Run a checkout and pay for it at the fake gateway.

    Returns (payment_id, order_id, signature) as the browser would post them.
    """
    def _checkout(user, items, coupon_code=None, status="captured"):
        products = [CheckoutItem(**item) for item in items]
        result = CheckoutService(session, gateway).create_checkout_order(user.id, products, coupon_code)
        order_id = result["orderId"]
        payment_id = gateway.pay(order_id, status=status)
        return payment_id, order_id, gateway.sign(order_id, payment_id, settings.RAZORPAY_KEY_SECRET)
    return _checkout


def _client_for(current_user, session, gateway):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_gateway] = lambda: gateway
    if current_user is not None:
        app.dependency_overrides[get_current_user] = lambda: current_user
    return TestClient(app)


@pytest.fixture
def client(session, gateway, user):
    yield _client_for(user, session, gateway)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(session, gateway, admin):
    yield _client_for(admin, session, gateway)
    app.dependency_overrides.clear()


@pytest.fixture
def anon_client(session, gateway):
    yield _client_for(None, session, gateway)
    app.dependency_overrides.clear()
