import logging

from rest_framework import status
from rest_framework.response import Response

from orders.exceptions import OrderActionError

logger = logging.getLogger(__name__)


class OrderActionErrorMixin:
    """
    Turns OrderActionError raised by the services into an HTTP response
    carrying the error kind and message.
    """

    def handle_exception(self, exc):
        if isinstance(exc, OrderActionError):
            if exc.http_status >= status.HTTP_500_INTERNAL_SERVER_ERROR:
                logger.error(f"{self.__class__.__name__} failed: {exc.message}")
            return Response(
                {"error": exc.kind.value, "message": exc.message},
                status=exc.http_status,
            )
        return super().handle_exception(exc)
