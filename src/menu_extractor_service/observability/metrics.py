"""Custom metrics for the menu extractor service."""

from opentelemetry import metrics

meter = metrics.get_meter("menu-extractor-svc")

extraction_success_counter = meter.create_counter(
    name="menu_extraction_success_total",
    description="Total number of successful menu extractions",
    unit="1",
)

extraction_failure_counter = meter.create_counter(
    name="menu_extraction_failure_total",
    description="Total number of failed menu extractions by error type",
    unit="1",
)

extraction_duration_histogram = meter.create_histogram(
    name="menu_extraction_duration_seconds",
    description="Duration of extraction service calls including normalization",
    unit="s",
)

extraction_items_histogram = meter.create_histogram(
    name="menu_extraction_items",
    description="Number of menu items in each successfully extracted document",
    unit="1",
)

theme_fallback_counter = meter.create_counter(
    name="theme_fallback_total",
    description="Total number of theme derivations that fell back to the default theme",
    unit="1",
)

edit_counter = meter.create_counter(
    name="menu_edit_total",
    description="Total number of document edits by operation",
    unit="1",
)

export_counter = meter.create_counter(
    name="menu_export_total",
    description="Total number of standalone HTML exports",
    unit="1",
)


def record_extraction_success(item_count: int) -> None:
    """Record a successful menu extraction.

    Args:
        item_count: Number of menu items in the normalized document
    """
    extraction_success_counter.add(1)
    extraction_items_histogram.record(item_count)


def record_extraction_failure(error_type: str) -> None:
    """Record a failed menu extraction.

    Args:
        error_type: Name of the error class or upstream failure kind
    """
    extraction_failure_counter.add(1, {"error_type": error_type})


def record_extraction_duration(duration_seconds: float) -> None:
    """Record the duration of an extraction attempt.

    Args:
        duration_seconds: Duration in seconds
    """
    extraction_duration_histogram.record(duration_seconds)


def record_theme_fallback(reason: str) -> None:
    """Record a theme derivation that used the fallback theme.

    Args:
        reason: Short description of why derivation failed
    """
    theme_fallback_counter.add(1, {"reason": reason})


def record_edit(op: str) -> None:
    """Record an applied document edit.

    Args:
        op: The edit operation name (e.g., "add_item", "rename_restaurant")
    """
    edit_counter.add(1, {"op": op})


def record_export() -> None:
    """Record a standalone HTML export."""
    export_counter.add(1)
