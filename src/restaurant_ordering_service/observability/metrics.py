"""Custom metrics for the ordering service."""

from opentelemetry import metrics

meter = metrics.get_meter("ordering-svc")

order_transition_counter = meter.create_counter(
    name="order_transitions_total",
    description="Order lifecycle transitions by kind (created, paid, unpaid, completed, ...)",
    unit="1",
)

bestseller_recompute_histogram = meter.create_histogram(
    name="bestseller_recompute_duration_seconds",
    description="Duration of bestseller recomputations by trigger",
    unit="s",
)

payment_gateway_response_time = meter.create_histogram(
    name="payment_gateway_response_time_seconds",
    description="Response time for payment gateway calls",
    unit="s",
)


def record_order_transition(transition: str) -> None:
    """Record an order lifecycle transition.

    Args:
        transition: e.g. "created", "paid", "unpaid", "completed", "cancelled"
    """
    order_transition_counter.add(1, {"transition": transition})


def record_bestseller_recompute(trigger: str, duration_seconds: float) -> None:
    """Record how long a bestseller recomputation took.

    Args:
        trigger: What caused it ("order_completed", "manual", "file_watch", ...)
        duration_seconds: Duration in seconds
    """
    bestseller_recompute_histogram.record(duration_seconds, {"trigger": trigger})


def record_payment_gateway_call(provider: str, success: bool, duration_seconds: float) -> None:
    """Record a payment gateway call."""
    payment_gateway_response_time.record(
        duration_seconds, {"provider": provider, "success": str(success).lower()}
    )
