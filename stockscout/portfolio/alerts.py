"""Portfolio alert engine: per-holding exit/hold classification.

Alert hierarchy (evaluated in order, first match wins):
  1. Price broke the 5-day average            -> STOP_LOSS
  2. Loss reached the fixed stop              -> STOP_LOSS
  3. Review day (Friday): every other state   -> REVIEW
  4. Loss inside the warning band (60% of SL) -> STOP_LOSS
  5. Gain reached the target: trend favourable -> HOLD, else TAKE_PROFIT
  6. Otherwise                                -> HOLD

Hard stops always win; the review day turns everything else into an
advisory REVIEW for the weekly rebalance.

The engine is stateless per call. Deduplication and "notify once"
policies belong to the caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Mapping, Sequence

from zoneinfo import ZoneInfo

from stockscout.core.config import AlertConfig, StrategySettings
from stockscout.core.types import PortfolioHolding, StockSnapshot
from stockscout.indicators.moving_average import moving_average

logger = logging.getLogger(__name__)


class AlertKind(Enum):
    """Recommended action for a held position."""

    STOP_LOSS = "STOP_LOSS"
    TAKE_PROFIT = "TAKE_PROFIT"
    HOLD = "HOLD"
    REVIEW = "REVIEW"

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]


_KIND_LABELS: dict[AlertKind, str] = {
    AlertKind.STOP_LOSS: "停損",
    AlertKind.TAKE_PROFIT: "停利",
    AlertKind.HOLD: "續抱",
    AlertKind.REVIEW: "週五複盤",
}


@dataclass(frozen=True)
class Alert:
    """Result of classifying one holding.

    Attributes:
        ticker: Holding ticker.
        kind: Recommended action.
        message: Human-readable explanation.
        rule: Name of the rule that fired (e.g. "below_ma5", "fixed_stop").
        gain: Fractional P&L used for the decision, positive is favourable.
    """

    ticker: str
    kind: AlertKind
    message: str
    rule: str
    gain: float = 0.0


def _pct(value: float) -> str:
    return f"{value * 100:.1f}%"


def classify(
    holding: PortfolioHolding,
    snapshot: StockSnapshot,
    settings: StrategySettings,
    today: date | None = None,
    config: AlertConfig | None = None,
) -> Alert:
    """Classify one holding into an alert.

    Args:
        holding: The open position (read only).
        snapshot: Latest snapshot for the same issuer.
        settings: Provides the stop-loss and take-profit fractions.
        today: Evaluation date; defaults to today in the market timezone.
        config: Review weekday and warning band; defaults apply if None.

    Returns:
        A fresh Alert. Nothing is remembered between calls.
    """
    cfg = config or AlertConfig()
    if today is None:
        today = datetime.now(ZoneInfo(cfg.timezone)).date()

    stop_loss = settings.portfolio.stop_loss
    take_profit = settings.portfolio.take_profit
    warning = stop_loss * cfg.warning_fraction

    is_short = holding.direction == "short"
    price = holding.current_price
    gain = holding.gain

    ma5 = moving_average(snapshot.klines, 5)
    ma20 = moving_average(snapshot.klines, 20)
    favorable = ma5 < ma20 if is_short else ma5 > ma20

    def _alert(kind: AlertKind, rule: str, message: str) -> Alert:
        return Alert(ticker=holding.ticker, kind=kind, message=message, rule=rule, gain=gain)

    # 1. Technical stop: MA5 of 0 means too little history and never fires
    broke_ma5 = ma5 > 0 and (price > ma5 if is_short else price < ma5)
    if broke_ma5:
        side = "above" if is_short else "below"
        action = "cover" if is_short else "exit"
        return _alert(
            AlertKind.STOP_LOSS,
            "below_ma5",
            f"Price {price:.2f} broke {side} the 5-day average ({ma5:.2f}); {action} now.",
        )

    # 2. Fixed stop
    if gain <= -stop_loss:
        return _alert(
            AlertKind.STOP_LOSS,
            "fixed_stop",
            f"Loss of {_pct(gain)} hit the {_pct(stop_loss)} fixed stop; exit now.",
        )

    # 3. Weekly review
    if today.weekday() == cfg.review_weekday:
        if gain >= take_profit:
            if favorable:
                return _alert(
                    AlertKind.REVIEW,
                    "review_target_strong",
                    "Target reached and the trend is in your favour; consider holding "
                    "into next week or taking partial profit.",
                )
            return _alert(
                AlertKind.REVIEW,
                "review_target_weak",
                "Target reached but the trend has turned; consider closing before "
                "the weekend.",
            )
        if gain > 0:
            return _alert(
                AlertKind.REVIEW,
                "review_in_profit",
                f"Up {_pct(gain)}; hold or tighten the trailing stop.",
            )
        return _alert(
            AlertKind.REVIEW,
            "review_at_loss",
            f"Down {_pct(gain)}; re-check the chart and decide between stopping out "
            "and holding into next week.",
        )

    # 4. Approaching the stop
    if gain <= -warning:
        return _alert(
            AlertKind.STOP_LOSS,
            "stop_warning",
            f"Loss of {_pct(gain)} is approaching the {_pct(stop_loss)} stop; watch closely.",
        )

    # 5. Target reached
    if gain >= take_profit:
        if favorable:
            trend = "MA5 < MA20" if is_short else "MA5 > MA20"
            return _alert(
                AlertKind.HOLD,
                "ride_trend",
                f"{_pct(take_profit)} target reached with the trend still in your favour "
                f"({trend}); hold and review on Friday.",
            )
        return _alert(
            AlertKind.TAKE_PROFIT,
            "target_hit",
            f"{_pct(take_profit)} target reached ({_pct(gain)}) and the trend is "
            "weakening; consider taking profit.",
        )

    # 6. Default
    return _alert(
        AlertKind.HOLD,
        "monitor",
        f"P&L {_pct(gain)}; keep monitoring intraday until the Friday review.",
    )


class PortfolioMonitor:
    """Runs ``classify`` over a whole portfolio.

    Holdings without a matching snapshot, or whose snapshot has fewer than
    ``min_history`` bars, are skipped silently.
    """

    def __init__(self, config: AlertConfig | None = None) -> None:
        self._config = config or AlertConfig()

    def check(
        self,
        holdings: Sequence[PortfolioHolding],
        snapshots: Sequence[StockSnapshot] | Mapping[str, StockSnapshot],
        settings: StrategySettings,
        today: date | None = None,
    ) -> list[Alert]:
        """Return one alert per evaluable holding, in holding order."""
        lookup = self._index(snapshots)
        if today is None:
            today = datetime.now(ZoneInfo(self._config.timezone)).date()

        alerts: list[Alert] = []
        for holding in holdings:
            snapshot = lookup.get(holding.id) or lookup.get(holding.ticker)
            if snapshot is None:
                logger.debug("PortfolioMonitor: no snapshot for %s, skipped", holding.ticker)
                continue
            if len(snapshot.klines) < self._config.min_history:
                logger.debug(
                    "PortfolioMonitor: %s has %d bars (< %d), skipped",
                    holding.ticker,
                    len(snapshot.klines),
                    self._config.min_history,
                )
                continue
            alerts.append(classify(holding, snapshot, settings, today, self._config))

        logger.info(
            "PortfolioMonitor: %d holdings -> %d alerts (%s)",
            len(holdings),
            len(alerts),
            today.isoformat(),
        )
        return alerts

    @staticmethod
    def _index(
        snapshots: Sequence[StockSnapshot] | Mapping[str, StockSnapshot],
    ) -> dict[str, StockSnapshot]:
        if isinstance(snapshots, Mapping):
            return dict(snapshots)
        index: dict[str, StockSnapshot] = {}
        for s in snapshots:
            index.setdefault(s.id, s)
            index.setdefault(s.ticker, s)
        return index
