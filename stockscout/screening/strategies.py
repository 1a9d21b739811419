"""Strategy scorers: five fixed rule sets used to rank gate-passed snapshots.

Every strategy evaluates an ordered set of boolean conditions and records
all of them in a per-strategy breakdown. The strategy "fires" only when
``conditions met / total conditions`` reaches the caller's threshold;
otherwise the score is 0 no matter how close it came.

Breakout and Growth additionally apply a trade-value floor after the
conditions are evaluated. The floor is a liquidity gate, not a condition,
so it never counts toward the satisfaction ratio.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from enum import Enum

from stockscout.core.config import StrategySettings
from stockscout.core.exceptions import StrategyError
from stockscout.core.types import StockSnapshot
from stockscout.indicators.moving_average import moving_average
from stockscout.indicators.volume import average_volume

logger = logging.getLogger(__name__)

# Breakout
_MA_CLUSTER_PCT = 0.03
_BREAKOUT_MIN_TRADE_VALUE = 30_000_000
_BREAKOUT_VOLUME_WEIGHT = 50.0

# Long term
_LT_MIN_ROE = 12.0
_LT_MIN_YIELD = 3.0
_LT_MAX_DEBT = 50.0
_LT_EPS_POINTS = 3

# Day trade
_DT_MIN_TRADE_VALUE = 500_000_000
_DT_MIN_AMPLITUDE = 3.0
_DT_MIN_PRICE = 20.0
_DT_MAX_PRICE = 150.0

# Value
_VALUE_MAX_PE = 15.0
_VALUE_MAX_PB = 1.2
_VALUE_MIN_YIELD = 4.0

# Growth
_GROWTH_MIN_GROSS_MARGIN = 25.0
_GROWTH_MIN_TRADE_VALUE = 20_000_000


class Strategy(Enum):
    """The closed set of screening strategies."""

    BREAKOUT = "BREAKOUT"
    LONG_TERM = "LONG_TERM"
    DAY_TRADE = "DAY_TRADE"
    VALUE = "VALUE"
    GROWTH = "GROWTH"

    @property
    def label(self) -> str:
        """Display name used by the screener UI."""
        return _LABELS[self]

    @classmethod
    def from_key(cls, key: str) -> "Strategy":
        """Resolve a strategy from its key, case-insensitively.

        Raises:
            StrategyError: If ``key`` names no known strategy.
        """
        normalized = key.strip().upper().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            raise StrategyError(key) from None


_LABELS: dict[Strategy, str] = {
    Strategy.BREAKOUT: "波段突破",
    Strategy.LONG_TERM: "長期投資",
    Strategy.DAY_TRADE: "當沖標的",
    Strategy.VALUE: "價值低估",
    Strategy.GROWTH: "成長動能",
}


# ---------------------------------------------------------------------------
# Breakdowns
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScoreBreakdown:
    """Base for the per-strategy condition records.

    Subclasses declare one bool field per condition, in evaluation order.
    """

    def conditions(self) -> dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @property
    def met(self) -> int:
        return sum(1 for v in self.conditions().values() if v)

    @property
    def total(self) -> int:
        return len(fields(self))

    @property
    def ratio(self) -> float:
        return self.met / self.total if self.total else 0.0

    def describe(self) -> list[str]:
        """Human-readable justification, one line per condition."""
        return [
            f"[{'x' if held else ' '}] {name.replace('_', ' ')}"
            for name, held in self.conditions().items()
        ]


@dataclass(frozen=True)
class BreakoutBreakdown(ScoreBreakdown):
    ma_cluster: bool
    volume_spike: bool
    price_above_mas: bool


@dataclass(frozen=True)
class LongTermBreakdown(ScoreBreakdown):
    high_roe: bool
    stable_eps: bool
    good_yield: bool
    low_debt: bool


@dataclass(frozen=True)
class DayTradeBreakdown(ScoreBreakdown):
    high_liquidity: bool
    high_amplitude: bool
    can_margin: bool
    good_price_range: bool


@dataclass(frozen=True)
class ValueBreakdown(ScoreBreakdown):
    low_pe: bool
    low_pb: bool
    high_yield: bool
    revenue_growing: bool


@dataclass(frozen=True)
class GrowthBreakdown(ScoreBreakdown):
    high_yoy_growth: bool
    high_gross_margin: bool
    above_quarter_line: bool


@dataclass(frozen=True)
class StrategyScore:
    """Score plus the breakdown that explains it."""

    score: float
    breakdown: ScoreBreakdown

    @property
    def fired(self) -> bool:
        return self.score > 0


def _fires(breakdown: ScoreBreakdown, threshold: float) -> bool:
    return breakdown.ratio >= threshold


# ---------------------------------------------------------------------------
# Scorers
# ---------------------------------------------------------------------------


def score_breakout(
    snapshot: StockSnapshot,
    threshold: float,
    settings: StrategySettings,
) -> StrategyScore:
    """Moving-average squeeze breaking out on volume."""
    klines = snapshot.klines
    close = snapshot.last_close
    ma5 = moving_average(klines, 5)
    ma20 = moving_average(klines, 20)
    ma60 = moving_average(klines, 60)

    ma_cluster = (
        ma5 > 0 and ma20 > 0 and ma60 > 0
        and abs(ma5 - ma20) / ma20 <= _MA_CLUSTER_PCT
        and abs(ma60 - ma20) / ma20 <= _MA_CLUSTER_PCT
    )

    today_volume = snapshot.latest_volume
    avg20 = average_volume(snapshot.volumes, 20)
    volume_spike = (
        avg20 > 0 and today_volume > avg20 * settings.screener.volume_multiplier
    )

    price_above_mas = ma60 > 0 and close > max(ma5, ma20, ma60)

    breakdown = BreakoutBreakdown(
        ma_cluster=ma_cluster,
        volume_spike=volume_spike,
        price_above_mas=price_above_mas,
    )

    score = 0.0
    if _fires(breakdown, threshold):
        score = (today_volume / avg20) * _BREAKOUT_VOLUME_WEIGHT if avg20 > 0 else 50.0
    if (snapshot.trade_value or 0) <= _BREAKOUT_MIN_TRADE_VALUE:
        score = 0.0
    return StrategyScore(score=score, breakdown=breakdown)


def _eps_non_decreasing(snapshot: StockSnapshot) -> bool:
    history = snapshot.eps_history
    if len(history) < _LT_EPS_POINTS:
        return False
    recent = [p.value for p in history[-_LT_EPS_POINTS:]]
    return all(later >= earlier for earlier, later in zip(recent, recent[1:]))


def score_long_term(
    snapshot: StockSnapshot,
    threshold: float,
    settings: StrategySettings,
) -> StrategyScore:
    """Durable profitability with income and a clean balance sheet."""
    roe = snapshot.roe or 0.0
    dy = snapshot.dividend_yield or 0.0

    breakdown = LongTermBreakdown(
        high_roe=roe >= _LT_MIN_ROE,
        stable_eps=_eps_non_decreasing(snapshot),
        good_yield=dy >= _LT_MIN_YIELD,
        low_debt=snapshot.debt_ratio is not None and snapshot.debt_ratio <= _LT_MAX_DEBT,
    )

    score = roe * 5 + dy * 10 if _fires(breakdown, threshold) else 0.0
    return StrategyScore(score=score, breakdown=breakdown)


def score_day_trade(
    snapshot: StockSnapshot,
    threshold: float,
    settings: StrategySettings,
) -> StrategyScore:
    """Liquid, volatile, marginable names in a tradeable price band."""
    trade_value = snapshot.trade_value or 0.0
    amplitude = snapshot.amplitude or 0.0
    close = snapshot.last_close

    breakdown = DayTradeBreakdown(
        high_liquidity=trade_value >= _DT_MIN_TRADE_VALUE,
        high_amplitude=amplitude >= _DT_MIN_AMPLITUDE,
        can_margin=snapshot.margin_trading,
        good_price_range=_DT_MIN_PRICE <= close <= _DT_MAX_PRICE,
    )

    score = 0.0
    if _fires(breakdown, threshold):
        score = amplitude * 20 + trade_value / 10_000_000
    return StrategyScore(score=score, breakdown=breakdown)


def score_value(
    snapshot: StockSnapshot,
    threshold: float,
    settings: StrategySettings,
) -> StrategyScore:
    """Cheap on earnings and book with a yield and growing sales."""
    pe = snapshot.pe_ratio or 0.0
    pb = snapshot.pb_ratio or 0.0
    dy = snapshot.dividend_yield or 0.0

    breakdown = ValueBreakdown(
        low_pe=0 < pe <= _VALUE_MAX_PE,
        low_pb=0 < pb <= _VALUE_MAX_PB,
        high_yield=dy >= _VALUE_MIN_YIELD,
        revenue_growing=(snapshot.revenue_growth or 0.0) > 0,
    )

    score = 0.0
    if _fires(breakdown, threshold):
        score = (_VALUE_MAX_PE - pe) * 4 + (_VALUE_MAX_PB - pb) * 30 + dy * 10
    return StrategyScore(score=score, breakdown=breakdown)


def score_growth(
    snapshot: StockSnapshot,
    threshold: float,
    settings: StrategySettings,
) -> StrategyScore:
    """Fast revenue growth at healthy margins, trading above the quarter line."""
    growth = snapshot.revenue_growth or 0.0
    gross_margin = snapshot.gross_margin or 0.0
    ma60 = moving_average(snapshot.klines, 60)

    breakdown = GrowthBreakdown(
        high_yoy_growth=growth >= settings.screener.min_revenue_growth,
        high_gross_margin=gross_margin >= _GROWTH_MIN_GROSS_MARGIN,
        above_quarter_line=ma60 > 0 and snapshot.last_close > ma60,
    )

    score = growth * 2 + gross_margin * 1.5 if _fires(breakdown, threshold) else 0.0
    if (snapshot.trade_value or 0) <= _GROWTH_MIN_TRADE_VALUE:
        score = 0.0
    return StrategyScore(score=score, breakdown=breakdown)


def evaluate(
    strategy: Strategy,
    snapshot: StockSnapshot,
    threshold: float,
    settings: StrategySettings,
) -> StrategyScore:
    """Score ``snapshot`` with the selected strategy.

    Args:
        strategy: One of the five strategies.
        snapshot: Gate-passed snapshot.
        threshold: Minimum condition-satisfaction ratio for the strategy
            to fire.
        settings: Strategy settings for this run (read only).

    Returns:
        StrategyScore with score 0 when the strategy did not fire.
    """
    if strategy is Strategy.BREAKOUT:
        return score_breakout(snapshot, threshold, settings)
    elif strategy is Strategy.LONG_TERM:
        return score_long_term(snapshot, threshold, settings)
    elif strategy is Strategy.DAY_TRADE:
        return score_day_trade(snapshot, threshold, settings)
    elif strategy is Strategy.VALUE:
        return score_value(snapshot, threshold, settings)
    elif strategy is Strategy.GROWTH:
        return score_growth(snapshot, threshold, settings)
    raise StrategyError(str(strategy))
