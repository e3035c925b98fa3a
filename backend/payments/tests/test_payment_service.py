"""
PaymentService tests: payment lookup and local bookkeeping of cancellations.
"""
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from orders.models import Order
from payments.gateways import PaymentGatewayError
from payments.models import Payment
from payments.services import PaymentService


@pytest.mark.django_db
class TestCancelPayment:
    def test_full_cancel(self, paid_order):
        payment = Payment.objects.get(order=paid_order)

        cancelled = PaymentService().cancel_payment(payment.payment_key, "Order rejected")

        assert cancelled.status == Payment.PaymentStatus.CANCELED
        assert cancelled.cancelled_amount == Decimal("15000.00")
        assert cancelled.cancel_reason == "Order rejected"
        paid_order.refresh_from_db()
        assert paid_order.payment_status == Order.PaymentStatus.REFUNDED

    def test_partial_cancel(self, paid_order):
        payment = Payment.objects.get(order=paid_order)

        cancelled = PaymentService().cancel_payment(
            payment.payment_key, "Missing side", amount=Decimal("5000")
        )

        assert cancelled.status == Payment.PaymentStatus.PARTIAL_CANCELED
        assert cancelled.cancellable_amount == Decimal("10000.00")
        paid_order.refresh_from_db()
        assert paid_order.payment_status == Order.PaymentStatus.COMPLETED

    def test_gateway_receives_amount_and_timeout(self, paid_order):
        gateway = MagicMock()
        payment = Payment.objects.get(order=paid_order)

        PaymentService(gateway=gateway).cancel_payment(
            payment.payment_key, "Order rejected", amount=Decimal("15000.00"), timeout=4
        )

        gateway.cancel.assert_called_once_with(
            payment.payment_key, "Order rejected", amount=Decimal("15000.00"), timeout=4
        )

    def test_gateway_failure_leaves_payment_untouched(self, paid_order):
        gateway = MagicMock()
        gateway.cancel.side_effect = PaymentGatewayError("provider down")
        payment = Payment.objects.get(order=paid_order)

        with pytest.raises(PaymentGatewayError):
            PaymentService(gateway=gateway).cancel_payment(payment.payment_key, "Order rejected")

        payment.refresh_from_db()
        assert payment.status == Payment.PaymentStatus.DONE
        assert payment.cancelled_amount == Decimal("0.00")

    def test_amount_above_cancellable(self, paid_order):
        payment = Payment.objects.get(order=paid_order)

        with pytest.raises(PaymentGatewayError) as exc_info:
            PaymentService().cancel_payment(payment.payment_key, "Too much", amount=Decimal("20000"))
        assert exc_info.value.code == "INVALID_CANCEL_AMOUNT"

    def test_already_cancelled(self, paid_order):
        payment = Payment.objects.get(order=paid_order)
        service = PaymentService()
        service.cancel_payment(payment.payment_key, "First")

        with pytest.raises(PaymentGatewayError) as exc_info:
            service.cancel_payment(payment.payment_key, "Second")
        assert exc_info.value.code == "NOT_CANCELABLE_PAYMENT"

    def test_unknown_payment(self, db):
        with pytest.raises(PaymentGatewayError) as exc_info:
            PaymentService().cancel_payment("pay_missing", "Order rejected")
        assert exc_info.value.code == "NOT_FOUND"


@pytest.mark.django_db
class TestPaymentLookup:
    def test_get_payment_by_order_id(self, paid_order, new_order):
        assert PaymentService.get_payment_by_order_id(paid_order.pk).order_id == paid_order.pk
        assert PaymentService.get_payment_by_order_id(new_order.pk) is None
