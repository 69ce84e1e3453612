"""OpenTelemetry instrumentation and logging setup for the menu extractor."""

from menu_extractor_service.observability.config import configure_logging, setup_observability
from menu_extractor_service.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]
