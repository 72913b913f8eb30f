# Import all models to register them with SQLModel
from storefront.models.user import User
from storefront.models.product import Product
from storefront.models.order import Order, OrderItem
from storefront.models.coupon import Coupon

__all__ = [
    "User",
    "Product",
    "Order",
    "OrderItem",
    "Coupon",
]
