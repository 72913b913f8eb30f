import json
import logging
from typing import Optional, Tuple

import razorpay
from razorpay.errors import SignatureVerificationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from storefront.core.config import settings
from storefront.core.exceptions import (
    GatewayError,
    InvalidSignature,
    OrderPersistenceError,
    PaymentNotCompleted,
)
from storefront.db.errors import is_unique_violation
from storefront.models.order import Order, OrderItem
from storefront.services.checkout import NO_COUPON
from storefront.services.coupon import CouponService
from storefront.services.gateway import PaymentGateway
from storefront.utils.money import to_major_units

logger = logging.getLogger(__name__)

CAPTURED = "captured"


def verify_signature(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    try:
        return razorpay.Utility().verify_signature(f"{order_id}|{payment_id}", signature, secret)
    except (SignatureVerificationError, TypeError):
        # TypeError: compare_digest refuses non-ASCII str or None
        return False


class PaymentVerifier:
    """Turns a gateway checkout callback into a persisted order.

    Steps run in a fixed order and stop at the first failure:
    signature check, capture check, coupon redemption, order insert.
    Re-submitting the same callback is safe: the second insert hits the
    unique gateway ids and the existing order is returned instead.
    """

    def __init__(self, session: Session, gateway: PaymentGateway, key_secret: str,
                 gift_threshold: Optional[int] = None):
        self.session = session
        self.gateway = gateway
        self.key_secret = key_secret
        self.coupons = CouponService(session)
        self.gift_threshold = gift_threshold if gift_threshold is not None else settings.GIFT_COUPON_THRESHOLD

    def verify_payment(self, payment_id: str, order_id: str, signature: str) -> dict:
        # Checked before any remote call or write
        if not verify_signature(order_id, payment_id, signature, self.key_secret):
            logger.warning("Rejected payment %s for order %s: invalid signature", payment_id, order_id)
            raise InvalidSignature("Invalid payment signature")

        payment = self.gateway.fetch_payment(payment_id)
        if payment.get("status") != CAPTURED:
            raise PaymentNotCompleted("Payment not completed")

        gateway_order = self.gateway.fetch_order(order_id)
        user_id, coupon_code, products = self._read_notes(gateway_order)

        if coupon_code and coupon_code != NO_COUPON:
            self.coupons.deactivate_coupon(coupon_code, user_id)

        amount = gateway_order["amount"]
        order, created = self._save_order(user_id, products, amount, order_id, payment_id, signature)

        if not created:
            return {
                "success": True,
                "message": "Payment successful, order already exists.",
                "orderId": order.id,
            }

        if amount >= self.gift_threshold:
            result = self.coupons.issue_gift_coupon_best_effort(user_id)
            if result.issued:
                logger.info("Gift coupon created for user: %s", user_id)

        return {
            "success": True,
            "message": "Payment successful, order created, and coupon deactivated if used.",
            "orderId": order.id,
        }

    def _read_notes(self, gateway_order: dict) -> Tuple[int, Optional[str], list]:
        # Razorpay returns an empty list, not a dict, when an order has no notes
        notes = gateway_order.get("notes") or {}
        try:
            user_id = int(notes["userId"])
            products = json.loads(notes["products"])
        except (KeyError, TypeError, ValueError) as e:
            raise GatewayError("Gateway order is missing checkout metadata", error=str(e)) from e
        return user_id, notes.get("couponCode"), products

    def _save_order(self, user_id: int, products: list, amount: int,
                    order_id: str, payment_id: str, signature: str) -> Tuple[Order, bool]:
        """Insert the order; returns (order, created)."""
        order = Order(
            user_id=user_id,
            total_amount=to_major_units(amount),
            razorpay_order_id=order_id,
            razorpay_payment_id=payment_id,
            razorpay_signature=signature,
            items=[
                OrderItem(
                    product_id=int(p["id"]),
                    quantity=int(p.get("quantity") or 1),
                    price=float(p["price"]),
                )
                for p in products
            ],
        )

        try:
            self.session.add(order)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            if not is_unique_violation(e):
                logger.error("Error saving order for razorpay order %s: %s", order_id, e)
                raise OrderPersistenceError("Error creating order", error=str(e)) from e

            existing = self.session.exec(
                select(Order).where(Order.razorpay_order_id == order_id)
            ).first()
            if not existing:
                raise OrderPersistenceError("Error creating order", error="Duplicate key error occurred") from e

            logger.info("Order %s already recorded for razorpay order %s", existing.id, order_id)
            return existing, False

        self.session.refresh(order)
        return order, True
