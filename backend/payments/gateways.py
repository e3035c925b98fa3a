from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict
import logging
import uuid

import requests

from .money import to_minor

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Raised when the payment gateway rejects or fails a request."""

    def __init__(self, message, code=None, details=None):
        self.code = code
        self.details = details
        super().__init__(message)


class PaymentGateway(ABC):
    """
    The Abstract Base Class for a payment gateway.
    Defines the calls the platform makes against an external payment provider.
    """

    @abstractmethod
    def cancel(
        self, payment_key: str, reason: str, amount: Decimal = None, timeout: float = None
    ) -> Dict[str, Any]:
        """
        Cancels (refunds) all or part of an approved payment.
        `amount=None` cancels the whole remaining amount.
        Returns the provider's payment object after cancellation.
        """
        pass


class HttpPaymentGateway(PaymentGateway):
    """
    Gateway for a Toss-style payments REST API.
    Authentication is HTTP basic auth with the secret key as username.
    """

    def __init__(
        self, base_url: str, secret_key: str, default_timeout: float = 10, currency: str = "KRW"
    ):
        self.base_url = base_url.rstrip("/")
        self.secret_key = secret_key
        self.default_timeout = default_timeout
        self.currency = currency

    def _make_request(
        self, method: str, endpoint: str, data: Dict[str, Any] = None, timeout: float = None
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{endpoint}"

        try:
            response = requests.request(
                method=method,
                url=url,
                auth=(self.secret_key, ""),
                headers={"Content-Type": "application/json"},
                json=data if data else None,
                timeout=timeout or self.default_timeout,
            )
            response.raise_for_status()

            if response.status_code == 204:
                return {}

            return response.json()

        except requests.HTTPError as e:
            details = None
            try:
                details = e.response.json()
            except ValueError:
                pass
            code = (details or {}).get("code")
            message = (details or {}).get("message") or str(e)
            logger.error(f"Payment API error: {method} {url} - {code} {message}")
            raise PaymentGatewayError(
                f"Payment API error: {message}", code=code, details=details
            ) from e
        except requests.RequestException as e:
            logger.error(f"Payment API request failed: {method} {url} - {e}")
            raise PaymentGatewayError(f"Payment API request failed: {e}") from e

    def cancel(self, payment_key, reason, amount=None, timeout=None):
        body = {"cancelReason": reason}
        if amount is not None:
            body["cancelAmount"] = to_minor(self.currency, amount)
        return self._make_request(
            "POST", f"/v1/payments/{payment_key}/cancel", body, timeout=timeout
        )


class LocalPaymentGateway(PaymentGateway):
    """
    Gateway for development and tests: approves every cancellation without
    any external call.
    """

    def cancel(self, payment_key, reason, amount=None, timeout=None):
        logger.info(f"Local gateway cancelling payment {payment_key} ({amount})")
        return {
            "paymentKey": payment_key,
            "status": "CANCELED",
            "cancels": [
                {
                    "transactionKey": uuid.uuid4().hex,
                    "cancelReason": reason,
                    "cancelAmount": str(amount) if amount is not None else None,
                }
            ],
        }


class PaymentGatewayFactory:
    """
    A factory for creating the configured payment gateway.
    """

    @staticmethod
    def get_gateway(name: str = None) -> PaymentGateway:
        from orders.config import order_settings

        name = name or order_settings.payment_gateway
        if name == "local":
            return LocalPaymentGateway()
        elif name == "http":
            return HttpPaymentGateway(
                base_url=order_settings.payment_api_base_url,
                secret_key=order_settings.payment_secret_key,
                default_timeout=order_settings.refund_timeout_seconds,
                currency=order_settings.currency,
            )
        else:
            raise ValueError(f"Unknown payment gateway: {name}")
