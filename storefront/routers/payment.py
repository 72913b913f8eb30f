import logging
from functools import lru_cache
from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlmodel import Session
from storefront.core.config import settings
from storefront.core.exceptions import StorefrontError
from storefront.db.session import get_session
from storefront.models.user import User
from storefront.routers.auth import get_current_user
from storefront.services.checkout import CheckoutService
from storefront.services.gateway import PaymentGateway, RazorpayGateway
from storefront.services.payment import PaymentVerifier

logger = logging.getLogger(__name__)

router = APIRouter()

class CheckoutItem(BaseModel):
    id: int
    price: float = Field(ge=0)
    quantity: Optional[int] = Field(default=None, ge=1)

class CheckoutRequest(BaseModel):
    products: Optional[List[CheckoutItem]] = None
    coupon_code: Optional[str] = None

class PaymentVerify(BaseModel):
    razorpay_payment_id: str
    razorpay_order_id: str
    razorpay_signature: str

@lru_cache
def get_gateway() -> PaymentGateway:
    return RazorpayGateway(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET)

def get_checkout_service(
    session: Session = Depends(get_session),
    gateway: PaymentGateway = Depends(get_gateway)
) -> CheckoutService:
    return CheckoutService(session, gateway)

def get_payment_verifier(
    session: Session = Depends(get_session),
    gateway: PaymentGateway = Depends(get_gateway)
) -> PaymentVerifier:
    return PaymentVerifier(session, gateway, key_secret=settings.RAZORPAY_KEY_SECRET)

@router.post("/create-order")
def create_order(
    order_in: CheckoutRequest,
    current_user: User = Depends(get_current_user),
    service: CheckoutService = Depends(get_checkout_service)
):
    try:
        return service.create_checkout_order(current_user.id, order_in.products, order_in.coupon_code)
    except StorefrontError:
        raise
    except Exception as e:
        logger.exception("Error processing checkout")
        raise StorefrontError("Error processing checkout", error=str(e)) from e

@router.post("/verify-payment")
def verify_payment(
    payment_in: PaymentVerify,
    current_user: User = Depends(get_current_user),
    verifier: PaymentVerifier = Depends(get_payment_verifier)
):
    try:
        return verifier.verify_payment(
            payment_id=payment_in.razorpay_payment_id,
            order_id=payment_in.razorpay_order_id,
            signature=payment_in.razorpay_signature,
        )
    except StorefrontError:
        raise
    except Exception as e:
        logger.exception("Error processing successful checkout")
        raise StorefrontError("Error processing successful checkout", error=str(e)) from e
