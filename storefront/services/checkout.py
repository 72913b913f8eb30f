import json
import logging
import time
from typing import List, Optional, Tuple

from sqlmodel import Session

from storefront.core.config import settings
from storefront.core.exceptions import ValidationError
from storefront.models.coupon import Coupon
from storefront.services.coupon import CouponService
from storefront.services.gateway import PaymentGateway
from storefront.utils.money import cart_total, percentage_of, to_major_units

logger = logging.getLogger(__name__)

# Stored in the gateway order notes when no coupon was supplied
NO_COUPON = "none"


def build_order_notes(user_id: int, coupon_code: Optional[str], products: List) -> dict:
    """Metadata the verifier rebuilds the order from, so client input is never trusted twice."""
    items = [{"id": p.id, "quantity": p.quantity or 1, "price": p.price} for p in products]
    return {
        "userId": str(user_id),
        "couponCode": coupon_code or NO_COUPON,
        "products": json.dumps(items, separators=(",", ":")),
    }


class CheckoutService:
    def __init__(self, session: Session, gateway: PaymentGateway,
                 currency: Optional[str] = None, gift_threshold: Optional[int] = None):
        self.session = session
        self.gateway = gateway
        self.coupons = CouponService(session)
        self.currency = currency or settings.CURRENCY
        self.gift_threshold = gift_threshold if gift_threshold is not None else settings.GIFT_COUPON_THRESHOLD

    def compute_total(self, products: List) -> int:
        return cart_total((p.price, p.quantity or 1) for p in products)

    def apply_coupon(self, total_amount: int, coupon_code: Optional[str], user_id: int) -> Tuple[int, Optional[Coupon]]:
        """Returns (discounted_total, coupon). Unknown or inactive codes leave the total unchanged."""
        if not coupon_code:
            return total_amount, None

        coupon = self.coupons.find_active_coupon(coupon_code, user_id)
        if not coupon:
            return total_amount, None

        discount = percentage_of(total_amount, coupon.discount_percentage)
        return total_amount - discount, coupon

    def create_checkout_order(self, user_id: int, products: List, coupon_code: Optional[str] = None) -> dict:
        if not isinstance(products, list) or len(products) == 0:
            raise ValidationError("Invalid or empty products array")

        # Calculate total amount in paise (Razorpay requirement)
        total_amount = self.compute_total(products)

        # Discount before the gateway order so its notes match the charged amount
        total_amount, coupon = self.apply_coupon(total_amount, coupon_code, user_id)
        if coupon:
            logger.info("Applied coupon %s (%s%%) for user %s", coupon.code, coupon.discount_percentage, user_id)

        order = self.gateway.create_order(
            amount=total_amount,
            currency=self.currency,
            receipt=f"receipt_{int(time.time() * 1000)}",
            notes=build_order_notes(user_id, coupon_code, products),
        )

        if total_amount >= self.gift_threshold:
            self.coupons.issue_gift_coupon_best_effort(user_id)

        return {
            "orderId": order["id"],
            "amount": order["amount"],
            "currency": order["currency"],
            "key": self.gateway.key_id,
            "totalAmount": to_major_units(total_amount),
        }
