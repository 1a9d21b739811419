"""StockScout: equity screening and position-alert engine."""

__version__ = "1.0.0"
