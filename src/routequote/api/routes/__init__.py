"""Route group exports."""

from . import health, hubs, quotes, reports

__all__ = ["health", "hubs", "quotes", "reports"]
