from datetime import timedelta
from sqlmodel import Session, select
from storefront.db.session import engine, create_db_and_tables
from storefront.models.coupon import Coupon
from storefront.utils.clock import utcnow
from storefront.models.product import Product
from storefront.models.user import User
from storefront.services.auth import AuthService

ADMIN_EMAIL = "admin@storefront.local"
ADMIN_PASSWORD = "change-me-admin"

PRODUCTS = [
    dict(name="Classic Denim Jacket", slug="classic-denim-jacket", description="Stonewashed denim jacket with a relaxed fit.", price=2499.00),
    dict(name="Everyday White Tee", slug="everyday-white-tee", description="Heavyweight cotton crew neck.", price=599.00),
    dict(name="Leather Chelsea Boots", slug="leather-chelsea-boots", description="Full-grain leather boots with elastic side panels.", price=4999.00),
    dict(name="Canvas Tote", slug="canvas-tote", description="Sturdy canvas tote for daily errands.", price=349.50),
]

def seed_database(session: Session) -> dict:
    """Insert demo products, an admin user and a test coupon. Safe to run twice."""
    created = {"products": 0, "admin": False, "coupon": False}

    for data in PRODUCTS:
        if not session.exec(select(Product).where(Product.slug == data["slug"])).first():
            session.add(Product(**data))
            created["products"] += 1

    admin = session.exec(select(User).where(User.email == ADMIN_EMAIL)).first()
    if not admin:
        admin = User(
            email=ADMIN_EMAIL,
            name="Store Admin",
            password_hash=AuthService(session).get_password_hash(ADMIN_PASSWORD),
            is_superuser=True
        )
        session.add(admin)
        created["admin"] = True

    session.commit()
    session.refresh(admin)

    # One coupon per user: replace whatever the admin holds
    if not session.exec(select(Coupon).where(Coupon.user_id == admin.id, Coupon.code == "TEST50")).first():
        for old in session.exec(select(Coupon).where(Coupon.user_id == admin.id)).all():
            session.delete(old)
        session.add(Coupon(
            code="TEST50",
            discount_percentage=50,
            expiration_date=utcnow() + timedelta(days=30),
            user_id=admin.id,
            is_active=True
        ))
        session.commit()
        created["coupon"] = True

    return created

if __name__ == "__main__":
    print("Creating database and tables...")
    create_db_and_tables()
    with Session(engine) as session:
        result = seed_database(session)
    print(f"Seeded {result['products']} products, admin created: {result['admin']}, test coupon created: {result['coupon']}")
