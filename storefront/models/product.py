from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime
from storefront.utils.clock import utcnow

class Product(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    # Basic Info
    name: str = Field(index=True)
    slug: str = Field(index=True, unique=True)
    description: str
    image_url: Optional[str] = None

    # Pricing, in major currency units
    price: float = Field(ge=0)

    # Metadata
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
