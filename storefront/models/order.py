from typing import List, Optional
from datetime import datetime
from storefront.utils.clock import utcnow
from sqlmodel import Field, Relationship, SQLModel

class OrderItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: Optional[int] = Field(default=None, foreign_key="order.id", index=True)
    product_id: int = Field(foreign_key="product.id")
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)

class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)

    # Amount actually charged, in major currency units
    total_amount: float = Field(ge=0)

    # Gateway Info, one order per real-world payment
    razorpay_order_id: str = Field(unique=True, index=True)
    razorpay_payment_id: str = Field(unique=True, index=True)
    razorpay_signature: Optional[str] = None

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Relationships
    items: List["OrderItem"] = Relationship(sa_relationship_kwargs={"cascade": "all, delete-orphan"})
