"""Portfolio monitoring.

This package contains:
- classify: per-holding stop/target/review decision
- PortfolioMonitor: runs classify over a portfolio, skipping thin history
"""
from stockscout.portfolio.alerts import Alert, AlertKind, PortfolioMonitor, classify

__all__ = ["Alert", "AlertKind", "PortfolioMonitor", "classify"]
