from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select, or_
from storefront.db.session import get_session
from storefront.models.product import Product
from storefront.models.user import User
from storefront.routers.auth import get_current_superuser

router = APIRouter()

@router.get("/", response_model=List[Product])
def read_products(q: Optional[str] = None, session: Session = Depends(get_session)):
    query = select(Product).where(Product.is_active == True)
    if q:
        query = query.where(
            or_(
                Product.name.ilike(f"%{q}%"),
                Product.description.ilike(f"%{q}%")
            )
        )
    return session.exec(query).all()

@router.get("/{product_id}", response_model=Product)
def read_product(product_id: int, session: Session = Depends(get_session)):
    product = session.get(Product, product_id)
    if not product or not product.is_active:
        raise HTTPException(status_code=404, detail="Product not found")
    return product

@router.post("/", response_model=Product)
def create_product(product: Product, current_user: User = Depends(get_current_superuser), session: Session = Depends(get_session)):
    session.add(product)
    session.commit()
    session.refresh(product)
    return product
