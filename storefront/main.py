import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from storefront.core.config import settings
from storefront.core.exceptions import StorefrontError
from storefront.core.logging import setup_logging
from storefront.db.session import create_db_and_tables

# Import models to ensure they are registered with SQLModel metadata
from storefront.models import User, Product, Order, OrderItem, Coupon

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    create_db_and_tables()
    logger.info("%s started", settings.PROJECT_NAME)
    yield

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    lifespan=lifespan,
    description="Checkout, payment verification and sales analytics API"
)

@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.get("/")
def read_root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}. Visit /docs for Swagger UI."}

from storefront.routers import auth, products, payment, coupons, analytics

app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(products.router, prefix="/api/v1/products", tags=["products"])
app.include_router(payment.router, prefix="/api/v1/payments", tags=["payments"])
app.include_router(coupons.router, prefix="/api/v1/coupons", tags=["coupons"])
app.include_router(analytics.router, prefix="/api/v1/analytics", tags=["analytics"])

# Add CORS
from fastapi.middleware.cors import CORSMiddleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], # Allow all for demo
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
