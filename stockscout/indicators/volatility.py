from __future__ import annotations

from typing import Sequence

from stockscout.core.types import PricePoint


def true_range_volatility(klines: Sequence[PricePoint], lookback: int = 14) -> float:
    """Mean true range over ``lookback`` days divided by the latest close.

    Needs ``lookback + 1`` bars so every true range has a previous close.
    Short history or a non-positive close yields 0.0.
    """
    if lookback <= 0 or len(klines) < lookback + 1:
        return 0.0
    bars = list(klines)[-(lookback + 1):]
    latest_close = bars[-1].close
    if latest_close <= 0:
        return 0.0

    true_ranges = []
    for i in range(1, len(bars)):
        high_low = bars[i].high - bars[i].low
        high_prev_close = abs(bars[i].high - bars[i - 1].close)
        low_prev_close = abs(bars[i].low - bars[i - 1].close)
        true_ranges.append(max(high_low, high_prev_close, low_prev_close))

    return (sum(true_ranges) / lookback) / latest_close
