from __future__ import annotations

from typing import Sequence


def average_volume(
    volumes: Sequence[float],
    window: int = 20,
    exclude_latest: bool = True,
) -> float:
    """Mean volume over ``window`` days.

    With ``exclude_latest`` (the default) the window ends the day before the
    latest point, giving the baseline that today's volume is compared to.
    Returns 0.0 when there are not enough points.
    """
    if window <= 0:
        return 0.0
    history = list(volumes)
    if exclude_latest:
        history = history[:-1]
    if len(history) < window:
        return 0.0
    return sum(history[-window:]) / window


def volume_ratio(volumes: Sequence[float], window: int = 20) -> float:
    """Today's volume over the preceding ``window``-day average (0.0 if undefined)."""
    baseline = average_volume(volumes, window)
    if baseline <= 0:
        return 0.0
    return volumes[-1] / baseline
