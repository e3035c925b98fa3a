from decimal import Decimal
from typing import Optional
import logging

from django.db import transaction

from orders.models import Order
from .gateways import PaymentGateway, PaymentGatewayError, PaymentGatewayFactory
from .models import Payment

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Payment collaborator used by the refund workflow.
    Looks up local payment records and cancels payments through the gateway.
    """

    def __init__(self, gateway: PaymentGateway = None):
        self._gateway = gateway

    @property
    def gateway(self) -> PaymentGateway:
        # Resolved per call unless injected, so settings overrides take effect
        return self._gateway or PaymentGatewayFactory.get_gateway()

    @staticmethod
    def get_payment_by_order_id(order_id) -> Optional[Payment]:
        return Payment.objects.filter(order_id=order_id).first()

    def cancel_payment(
        self, payment_key: str, reason: str, amount: Decimal = None, timeout: float = None
    ) -> Payment:
        """
        Cancels `amount` (default: everything still cancellable) of a payment,
        then records the cancellation locally.
        Raises PaymentGatewayError when the payment cannot be cancelled.
        """
        payment = Payment.objects.filter(payment_key=payment_key).first()
        if payment is None:
            raise PaymentGatewayError(f"Payment {payment_key} not found", code="NOT_FOUND")
        if not payment.is_cancellable:
            raise PaymentGatewayError(
                f"Payment {payment_key} cannot be cancelled in status {payment.status}",
                code="NOT_CANCELABLE_PAYMENT",
            )

        amount = Decimal(amount) if amount is not None else payment.cancellable_amount
        if amount <= 0 or amount > payment.cancellable_amount:
            raise PaymentGatewayError(
                f"Cancel amount {amount} exceeds cancellable amount "
                f"{payment.cancellable_amount} for payment {payment_key}",
                code="INVALID_CANCEL_AMOUNT",
            )

        logger.info(f"Cancelling payment {payment_key}: {amount} ({reason})")
        self.gateway.cancel(payment_key, reason, amount=amount, timeout=timeout)

        return self._record_cancellation(payment, amount, reason)

    @staticmethod
    @transaction.atomic
    def _record_cancellation(payment: Payment, amount: Decimal, reason: str) -> Payment:
        payment = Payment.objects.select_for_update().get(pk=payment.pk)
        payment.cancelled_amount += amount
        payment.cancel_reason = reason
        if payment.cancelled_amount >= payment.amount:
            payment.status = Payment.PaymentStatus.CANCELED
        else:
            payment.status = Payment.PaymentStatus.PARTIAL_CANCELED
        payment.save(update_fields=["cancelled_amount", "cancel_reason", "status", "updated_at"])

        if payment.status == Payment.PaymentStatus.CANCELED:
            # The approved amount has been returned in full
            Order.objects.filter(pk=payment.order_id).update(
                payment_status=Order.PaymentStatus.REFUNDED
            )

        logger.info(
            f"Payment {payment.payment_key} now {payment.status} "
            f"({payment.cancelled_amount}/{payment.amount} cancelled)"
        )
        return payment


payment_service = PaymentService()
