"""
Lazy accessor for the ORDER_MANAGEMENT settings block.

Values are read from django.conf.settings on first access and cached on the
singleton; the cache is dropped whenever ORDER_MANAGEMENT is overridden
(e.g. by override_settings in tests).
"""

import logging
from typing import Any, Optional

from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver

logger = logging.getLogger(__name__)


DEFAULTS = {
    "URGENT_ORDER_MINUTES": 30,
    "MAX_BULK_ORDERS": 100,
    "BULK_MAX_WORKERS": 1,
    "NOTIFICATION_TIMEOUT_SECONDS": 5,
    "REFUND_TIMEOUT_SECONDS": 10,
    "REFUND_MAX_ATTEMPTS": 5,
    "PAYMENT_GATEWAY": "local",
    "PAYMENT_API_BASE_URL": "https://api.tosspayments.com",
    "PAYMENT_SECRET_KEY": "",
    "CURRENCY": "KRW",
    "DEFAULT_PAGE_SIZE": 20,
    "MAX_PAGE_SIZE": 100,
}

MIN_COOKING_TIME = 1
MAX_COOKING_TIME = 300


class OrderSettings:
    """
    A LAZY singleton exposing ORDER_MANAGEMENT keys as lower-case attributes,
    e.g. order_settings.urgent_order_minutes.
    """

    _instance: Optional["OrderSettings"] = None

    def __new__(cls) -> "OrderSettings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._values = None
        return cls._instance

    def _setup(self):
        configured = getattr(settings, "ORDER_MANAGEMENT", {}) or {}
        unknown = set(configured) - set(DEFAULTS)
        if unknown:
            logger.warning(f"Ignoring unknown ORDER_MANAGEMENT keys: {sorted(unknown)}")
        values = dict(DEFAULTS)
        values.update({k: v for k, v in configured.items() if k in DEFAULTS})
        self._values = values

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        if self._values is None:
            self._setup()
        try:
            return self._values[name.upper()]
        except KeyError:
            raise AttributeError(f"'OrderSettings' object has no attribute '{name}'")

    def reload(self) -> None:
        self._values = None
        logger.debug("OrderSettings cache cleared")


order_settings = OrderSettings()


@receiver(setting_changed)
def _reset_order_settings(sender, setting, **kwargs):
    if setting == "ORDER_MANAGEMENT":
        order_settings.reload()
