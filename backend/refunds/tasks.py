from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task
def retry_failed_refunds():
    """
    Retry FAILED refund attempts that still have attempts left.

    This task runs every 10 minutes via Celery Beat.

    Returns:
        dict: counts of retried, succeeded and still failing attempts
    """
    from orders.config import order_settings
    from .services import refund_coordinator

    try:
        max_attempts = order_settings.refund_max_attempts
        attempts = list(refund_coordinator.pending_retries(max_attempts))

        if not attempts:
            logger.info("No failed refunds to retry")
            return {"retried": 0, "succeeded": 0, "failed": 0}

        succeeded = 0
        for attempt in attempts:
            if refund_coordinator.retry(attempt).success:
                succeeded += 1

        result = {
            "retried": len(attempts),
            "succeeded": succeeded,
            "failed": len(attempts) - succeeded,
        }
        logger.info(f"Retried {len(attempts)} failed refunds, {succeeded} succeeded")
        return result

    except Exception as e:
        logger.error(f"Error retrying failed refunds: {e}", exc_info=True)
        raise
