"""Custom metrics for the menu service."""

from opentelemetry import metrics

meter = metrics.get_meter("menu-svc")

menu_fetch_success_counter = meter.create_counter(
    name="menu_fetch_success_total",
    description="Total number of successful remote menu fetches",
    unit="1",
)

menu_fetch_failure_counter = meter.create_counter(
    name="menu_fetch_failure_total",
    description="Total number of failed remote menu fetches by error type",
    unit="1",
)

menu_items_persisted_counter = meter.create_counter(
    name="menu_items_persisted_total",
    description="Total number of menu items written to the local store",
    unit="1",
)

menu_query_duration_histogram = meter.create_histogram(
    name="menu_query_duration_seconds",
    description="Duration of filtered menu queries against the local store",
    unit="s",
)

menu_snapshot_size_histogram = meter.create_histogram(
    name="menu_snapshot_items",
    description="Number of items in each successfully fetched menu snapshot",
    unit="1",
)

store_fallback_counter = meter.create_counter(
    name="menu_store_fallback_total",
    description="Store failures absorbed by a fallback value, by operation",
    unit="1",
)


def record_fetch_success(item_count: int) -> None:
    """Record a successful remote menu fetch.

    Args:
        item_count: Number of menu items in the snapshot
    """
    menu_fetch_success_counter.add(1)
    menu_snapshot_size_histogram.record(item_count)


def record_fetch_failure(error_type: str) -> None:
    """Record a failed remote menu fetch.

    Args:
        error_type: Exception class name of the failure
    """
    menu_fetch_failure_counter.add(1, {"error_type": error_type})


def record_items_persisted(item_count: int) -> None:
    """Record menu items written by a replace-all."""
    menu_items_persisted_counter.add(item_count)


def record_query_duration(duration_seconds: float, filtered: bool) -> None:
    """Record the duration of a menu query.

    Args:
        duration_seconds: Duration in seconds
        filtered: Whether any criteria were applied
    """
    menu_query_duration_histogram.record(duration_seconds, {"filtered": filtered})


def record_store_fallback(operation: str) -> None:
    """Record a store failure that was replaced by a fallback value."""
    store_fallback_counter.add(1, {"operation": operation})
