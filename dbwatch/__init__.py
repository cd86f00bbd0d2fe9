"""Change-notification watchers: events, filters, channels and watch queries."""

__version__ = "0.8.1"

__all__ = ["batch", "event", "filter", "query", "request", "watchers"]