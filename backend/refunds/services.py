"""
Refund coordination for rejected orders.

Refunds are best effort: a failed cancellation is logged, stored as a FAILED
RefundAttempt for the periodic retry task, and reported back to the caller
without raising. The order rejection that triggered it always stands.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
import logging

from payments.services import PaymentService, payment_service as default_payment_service
from .models import RefundAttempt

logger = logging.getLogger(__name__)


@dataclass
class RefundResult:
    success: bool
    amount: Decimal
    attempt: Optional[RefundAttempt] = None
    error: Optional[str] = None


class RefundCoordinator:
    def __init__(self, payment_service: PaymentService = None, timeout: float = None):
        self.payment_service = payment_service or default_payment_service
        self._timeout = timeout

    @property
    def timeout(self):
        if self._timeout is not None:
            return self._timeout
        from orders.config import order_settings

        return order_settings.refund_timeout_seconds

    def refund(self, order, amount: Decimal, reason: str) -> RefundResult:
        """
        Cancels `amount` of the order's payment. Never raises.
        """
        payment = self.payment_service.get_payment_by_order_id(order.pk)
        payment_key = payment.payment_key if payment else ""

        try:
            if payment is None:
                raise LookupError(f"No payment recorded for order {order.pk}")
            self.payment_service.cancel_payment(
                payment_key, reason, amount=amount, timeout=self.timeout
            )
        except Exception as e:
            logger.error(
                f"Refund of {amount} for order {order.pk} failed, queued for retry: {e}",
                exc_info=True,
            )
            attempt = RefundAttempt.objects.create(
                order=order,
                payment_key=payment_key,
                amount=amount,
                reason=reason,
                status=RefundAttempt.Status.FAILED,
                last_error=str(e),
            )
            return RefundResult(success=False, amount=amount, attempt=attempt, error=str(e))

        attempt = RefundAttempt.objects.create(
            order=order,
            payment_key=payment_key,
            amount=amount,
            reason=reason,
            status=RefundAttempt.Status.SUCCEEDED,
        )
        logger.info(f"Refunded {amount} for order {order.pk} (payment {payment_key})")
        return RefundResult(success=True, amount=amount, attempt=attempt)

    def retry(self, attempt: RefundAttempt) -> RefundResult:
        """
        Re-runs a FAILED attempt in place, bumping its attempt counter.
        """
        payment_key = attempt.payment_key
        try:
            if not payment_key:
                payment = self.payment_service.get_payment_by_order_id(attempt.order_id)
                if payment is None:
                    raise LookupError(f"No payment recorded for order {attempt.order_id}")
                payment_key = payment.payment_key
            self.payment_service.cancel_payment(
                payment_key, attempt.reason, amount=attempt.amount, timeout=self.timeout
            )
        except Exception as e:
            attempt.attempts += 1
            attempt.payment_key = payment_key
            attempt.last_error = str(e)
            attempt.save(update_fields=["attempts", "payment_key", "last_error", "updated_at"])
            logger.warning(
                f"Refund retry {attempt.attempts} for order {attempt.order_id} failed: {e}"
            )
            return RefundResult(success=False, amount=attempt.amount, attempt=attempt, error=str(e))

        attempt.attempts += 1
        attempt.payment_key = payment_key
        attempt.status = RefundAttempt.Status.SUCCEEDED
        attempt.last_error = None
        attempt.save(
            update_fields=["attempts", "payment_key", "status", "last_error", "updated_at"]
        )
        logger.info(f"Refund retry succeeded for order {attempt.order_id}")
        return RefundResult(success=True, amount=attempt.amount, attempt=attempt)

    @staticmethod
    def pending_retries(max_attempts: int):
        return RefundAttempt.objects.filter(
            status=RefundAttempt.Status.FAILED, attempts__lt=max_attempts
        ).order_by("created_at")


refund_coordinator = RefundCoordinator()
