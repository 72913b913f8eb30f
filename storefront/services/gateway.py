import logging
from abc import ABC, abstractmethod
from typing import Optional

import razorpay
import requests
from razorpay.errors import BadRequestError, ServerError
from razorpay.errors import GatewayError as RazorpaySDKError

from storefront.core.exceptions import GatewayError

logger = logging.getLogger(__name__)

SDK_ERRORS = (BadRequestError, ServerError, RazorpaySDKError, requests.RequestException)


class PaymentGateway(ABC):
    """Remote payment service used by checkout and payment verification.

    Responses are plain dicts shaped like the Razorpay API entities:
    orders carry ``id``, ``amount``, ``currency`` and ``notes``;
    payments carry ``id`` and ``status``.
    """

    key_id: str = ""

    @abstractmethod
    def create_order(self, amount: int, currency: str, receipt: str, notes: dict) -> dict:
        ...

    @abstractmethod
    def fetch_payment(self, payment_id: str) -> dict:
        ...

    @abstractmethod
    def fetch_order(self, order_id: str) -> dict:
        ...


class RazorpayGateway(PaymentGateway):
    def __init__(self, key_id: str, key_secret: str, client: Optional[razorpay.Client] = None):
        self.key_id = key_id
        self.client = client or razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount: int, currency: str, receipt: str, notes: dict) -> dict:
        # Amount needed in paise
        data = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "payment_capture": 1,
            "notes": notes,
        }
        return self._call("create order", self.client.order.create, data=data)

    def fetch_payment(self, payment_id: str) -> dict:
        return self._call("fetch payment", self.client.payment.fetch, payment_id)

    def fetch_order(self, order_id: str) -> dict:
        return self._call("fetch order", self.client.order.fetch, order_id)

    def _call(self, action: str, fn, *args, **kwargs) -> dict:
        try:
            return fn(*args, **kwargs)
        except SDK_ERRORS as e:
            logger.error("Razorpay %s failed: %s", action, e)
            raise GatewayError(f"Payment gateway failed to {action}", error=str(e)) from e
