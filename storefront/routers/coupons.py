from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session
from storefront.db.session import get_session
from storefront.models.user import User
from storefront.routers.auth import get_current_user, get_current_superuser
from storefront.services.coupon import CouponService

router = APIRouter()

class CouponRead(BaseModel):
    code: str
    discount_percentage: float
    expiration_date: datetime
    is_active: bool

class CouponValidate(BaseModel):
    code: str

class GiftCouponCreate(BaseModel):
    user_id: int

def get_coupon_service(session: Session = Depends(get_session)) -> CouponService:
    return CouponService(session)

@router.get("/", response_model=Optional[CouponRead])
def get_coupon(
    current_user: User = Depends(get_current_user),
    service: CouponService = Depends(get_coupon_service)
):
    """Active coupon of the current user, or null."""
    return service.get_active_coupon(current_user.id)

@router.post("/validate")
def validate_coupon(
    data: CouponValidate,
    current_user: User = Depends(get_current_user),
    service: CouponService = Depends(get_coupon_service)
):
    coupon = service.validate_coupon(data.code, current_user.id)
    return {
        "message": "Coupon is valid",
        "code": coupon.code,
        "discountPercentage": coupon.discount_percentage,
    }

@router.post("/gift", response_model=CouponRead)
def issue_gift_coupon(
    data: GiftCouponCreate,
    current_user: User = Depends(get_current_superuser),
    service: CouponService = Depends(get_coupon_service)
):
    """Grant a gift coupon directly. Unlike checkout, failures here are reported."""
    if not service.session.get(User, data.user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return service.issue_gift_coupon(data.user_id)
