import logging
import random
import string
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from storefront.core.config import settings
from storefront.core.exceptions import CouponIssuanceError, CouponNotFound
from storefront.models.coupon import Coupon
from storefront.utils.clock import utcnow

logger = logging.getLogger(__name__)

GIFT_CODE_LENGTH = 6


def generate_gift_code(prefix: str = None) -> str:
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=GIFT_CODE_LENGTH))
    return (prefix or settings.GIFT_COUPON_PREFIX) + suffix


@dataclass
class GiftCouponResult:
    """Outcome of a gift issuance that must never fail its parent operation."""

    issued: bool
    coupon: Optional[Coupon] = None
    error: Optional[str] = None


class CouponService:
    def __init__(self, session: Session):
        self.session = session

    def get_active_coupon(self, user_id: int) -> Optional[Coupon]:
        return self.session.exec(
            select(Coupon).where(Coupon.user_id == user_id, Coupon.is_active == True)
        ).first()

    def find_active_coupon(self, code: str, user_id: int) -> Optional[Coupon]:
        return self.session.exec(
            select(Coupon).where(
                Coupon.code == code,
                Coupon.user_id == user_id,
                Coupon.is_active == True
            )
        ).first()

    def validate_coupon(self, code: str, user_id: int) -> Coupon:
        coupon = self.find_active_coupon(code, user_id)
        if not coupon:
            raise CouponNotFound("Coupon not found")

        if coupon.is_expired:
            coupon.is_active = False
            coupon.updated_at = utcnow()
            self.session.add(coupon)
            self.session.commit()
            raise CouponNotFound("Coupon expired")

        return coupon

    def deactivate_coupon(self, code: str, user_id: int) -> Optional[Coupon]:
        """Mark a redeemed coupon inactive. Missing coupons are ignored."""
        coupon = self.session.exec(
            select(Coupon).where(Coupon.code == code, Coupon.user_id == user_id)
        ).first()
        if not coupon:
            return None

        coupon.is_active = False
        coupon.updated_at = utcnow()
        self.session.add(coupon)
        self.session.commit()
        self.session.refresh(coupon)
        return coupon

    def issue_gift_coupon(self, user_id: int) -> Coupon:
        """Replace whatever coupon the user holds with a fresh gift coupon.

        The delete and the insert share one commit, so the user never ends
        up with two coupons. Code collisions are not checked.
        """
        try:
            existing = self.session.exec(select(Coupon).where(Coupon.user_id == user_id)).all()
            for old in existing:
                logger.info("Deleting existing coupon %s for user %s", old.code, user_id)
                self.session.delete(old)

            coupon = Coupon(
                code=generate_gift_code(),
                discount_percentage=settings.GIFT_COUPON_DISCOUNT,
                expiration_date=utcnow() + timedelta(days=settings.GIFT_COUPON_VALID_DAYS),
                user_id=user_id,
            )
            self.session.add(coupon)
            self.session.commit()
            self.session.refresh(coupon)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise CouponIssuanceError("Error creating gift coupon", error=str(e)) from e

        logger.info("Created gift coupon %s for user %s", coupon.code, user_id)
        return coupon

    def issue_gift_coupon_best_effort(self, user_id: int) -> GiftCouponResult:
        try:
            coupon = self.issue_gift_coupon(user_id)
        except Exception as e:
            # Don't fail checkout or payment if coupon creation fails
            self.session.rollback()
            logger.exception("Failed to create gift coupon for user %s", user_id)
            return GiftCouponResult(issued=False, error=str(e))
        return GiftCouponResult(issued=True, coupon=coupon)
