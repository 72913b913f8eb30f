from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Storefront API"
    DATABASE_URL: str = "sqlite:///./storefront.db"
    SECRET_KEY: str = "supersecretkey_change_me_in_production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7 # 1 week
    LOG_LEVEL: str = "INFO"

    # Razorpay
    RAZORPAY_KEY_ID: str = "rzp_test_placeholder"
    RAZORPAY_KEY_SECRET: str = "rzp_secret_placeholder"
    CURRENCY: str = "INR"

    # Gift coupons, threshold in minor units (paise)
    GIFT_COUPON_THRESHOLD: int = 200000
    GIFT_COUPON_DISCOUNT: int = 10
    GIFT_COUPON_VALID_DAYS: int = 30
    GIFT_COUPON_PREFIX: str = "GIFT"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
