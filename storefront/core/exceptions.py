from typing import Optional


class StorefrontError(Exception):
    """Base error for checkout and payment failures.

    Carries the HTTP status the API layer should answer with, plus the
    underlying cause message for server-side failures.
    """

    status_code: int = 500

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error

    def to_dict(self) -> dict:
        body = {"detail": self.message}
        if self.error:
            body["error"] = self.error
        return body


class ValidationError(StorefrontError):
    status_code = 400


class InvalidSignature(StorefrontError):
    status_code = 400


class PaymentNotCompleted(StorefrontError):
    status_code = 400


class CouponNotFound(StorefrontError):
    status_code = 404


class OrderPersistenceError(StorefrontError):
    status_code = 500


class CouponIssuanceError(StorefrontError):
    status_code = 500


class GatewayError(StorefrontError):
    status_code = 502
