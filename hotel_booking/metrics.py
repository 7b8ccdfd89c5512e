"""
Prometheus metrics for booking operations, capacity and collaborators.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Example:
    >>> from hotel_booking.metrics import booking_operations, operation_duration
    >>> with operation_duration.labels(operation="create").time():
    ...     booking = service.create_booking(principal, payload)
    >>> booking_operations.labels(operation="create", outcome="success").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Booking Metrics
# =============================================================================

booking_operations = Counter(
    "hotel_booking_operations_total",
    "Total booking operations by outcome",
    ["operation", "outcome"],
)
"""
Counter for booking operations.

Labels:
    operation: create, modify, cancel, update_status, capture, refund
    outcome: success, rejected (client error) or error (server error)
"""

operation_duration = Histogram(
    "hotel_booking_operation_duration_seconds",
    "Duration of booking operations in seconds",
    ["operation"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, float("inf")),
)

capacity_rejections = Counter(
    "hotel_booking_capacity_rejections_total",
    "Booking attempts rejected because the room had too few units left",
)

# =============================================================================
# Collaborator Metrics
# =============================================================================

notification_failures = Counter(
    "hotel_booking_notification_failures_total",
    "Notifications that could not be delivered",
    ["kind"],
)

payment_events = Counter(
    "hotel_booking_payment_events_total",
    "Payment reports received from the payment gateway",
    ["event", "outcome"],
)
"""
Counter for payment reports.

Labels:
    event: capture or refund
    outcome: succeeded or failed (as reported by the gateway)
"""
