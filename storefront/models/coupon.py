from typing import Optional
from datetime import datetime
from storefront.utils.clock import as_utc, utcnow
from sqlmodel import Field, SQLModel

class Coupon(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    # Coupon Details, codes are not unique across users
    code: str = Field(index=True)
    discount_percentage: float = Field(ge=0, le=100)
    expiration_date: datetime

    # Owner
    user_id: int = Field(foreign_key="user.id", index=True)

    # Status
    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_expired(self) -> bool:
        return as_utc(self.expiration_date) < utcnow()
