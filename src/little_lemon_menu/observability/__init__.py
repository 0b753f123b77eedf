"""OpenTelemetry instrumentation and observability utilities."""

from little_lemon_menu.observability.config import configure_logging, setup_observability
from little_lemon_menu.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]
