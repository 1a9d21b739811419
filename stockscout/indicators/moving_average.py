from __future__ import annotations

from typing import Sequence

from stockscout.core.types import PricePoint


def moving_average(klines: Sequence[PricePoint], period: int) -> float:
    """Arithmetic mean of the last ``period`` closes.

    Returns 0.0 when fewer than ``period`` bars exist. Real closes are
    always positive, so callers treat 0.0 as "undefined".
    """
    if period <= 0 or len(klines) < period:
        return 0.0
    closes = [k.close for k in list(klines)[-period:]]
    return sum(closes) / period


def price_momentum(klines: Sequence[PricePoint], lookback: int = 5) -> float:
    """Fractional change of the last close versus ``lookback`` bars earlier."""
    if lookback <= 0 or len(klines) <= lookback:
        return 0.0
    base = klines[-lookback - 1].close
    if base <= 0:
        return 0.0
    return (klines[-1].close - base) / base
