"""
Orders services package - owner-facing order lifecycle.

- AccessGuard: ownership checks for restaurants and orders
- AuditTrail: append-only status history and lifecycle events
- OrderLifecycleService: status changes, rejection, cooking time and reads
- BulkActionProcessor: one action over many orders of a restaurant
- StatsAggregator: dashboard statistics
"""

# Ownership checks
from .access_guard import AccessGuard, access_guard

# Audit
from .audit_service import AuditTrail, audit_trail

# Statistics
from .stats_service import StatsAggregator, stats_aggregator

# Lifecycle
from .lifecycle_service import OrderLifecycleService, order_lifecycle_service

# Bulk operations
from .bulk_service import BulkActionProcessor, BulkActionResult, bulk_action_processor

__all__ = [
    'AccessGuard',
    'access_guard',
    'AuditTrail',
    'audit_trail',
    'StatsAggregator',
    'stats_aggregator',
    'OrderLifecycleService',
    'order_lifecycle_service',
    'BulkActionProcessor',
    'BulkActionResult',
    'bulk_action_processor',
]
