"""Core data types shared by the screening and portfolio engines.

Snapshots and holdings are supplied by the calling application and are
never mutated here; every engine call reads them and returns fresh
result objects.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Literal, Mapping

Direction = Literal["long", "short"]


@dataclass(frozen=True)
class PricePoint:
    """One daily OHLC bar."""

    date: date
    open: float
    high: float
    low: float
    close: float


@dataclass(frozen=True)
class EpsPoint:
    year: int
    value: float


@dataclass(frozen=True)
class StockSnapshot:
    """Immutable per-run view of a single issuer.

    Attributes:
        id: Stable issuer id (e.g. "2330").
        ticker: Display ticker (e.g. "2330.TW").
        name: Issuer name.
        klines: Chronological daily bars, oldest first.
        volumes: Daily volumes, time-aligned with ``klines``.
        close: Latest close; falls back to the last kline when absent.
        revenue_growth: Year-over-year revenue growth in percent.
        consecutive_revenue_growth_months: Months of uninterrupted growth.
        roe: Return on equity in percent.
        debt_ratio: Liabilities over assets in percent.
        dividend_yield: Cash dividend yield in percent.
        trade_value: Latest daily trade value in TWD.
        amplitude: Latest daily amplitude in percent.
        margin_trading: Whether the issuer is flagged margin-eligible.
        eps_history: Annual EPS, oldest first.
        volatility: ATR-style volatility as a fraction of price.
        odd_lot_volume: Latest odd-lot (fractional share) volume.
    """

    id: str
    ticker: str
    name: str = ""
    klines: tuple[PricePoint, ...] = ()
    volumes: tuple[float, ...] = ()
    close: float | None = None
    daily_open: float | None = None
    daily_high: float | None = None
    daily_low: float | None = None
    revenue_growth: float | None = None
    consecutive_revenue_growth_months: int = 0
    roe: float | None = None
    debt_ratio: float | None = None
    dividend_yield: float | None = None
    pe_ratio: float | None = None
    pb_ratio: float | None = None
    gross_margin: float | None = None
    trade_value: float | None = None
    amplitude: float | None = None
    margin_trading: bool = False
    eps_history: tuple[EpsPoint, ...] = ()
    volatility: float = 0.0
    odd_lot_volume: float = 0.0

    @property
    def last_close(self) -> float:
        """Latest close price, or 0.0 when nothing is known."""
        if self.close is not None:
            return self.close
        if self.klines:
            return self.klines[-1].close
        return 0.0

    @property
    def latest_volume(self) -> float:
        return self.volumes[-1] if self.volumes else 0.0


@dataclass(frozen=True)
class ReferenceSets:
    """External lookups consulted by the quality gate.

    Attributes:
        suspended: Ids/tickers whose trading is suspended.
        margin_eligible: Ids/tickers eligible for margin trading.
        industries: Ticker (or id) -> industry classification name.
    """

    suspended: frozenset[str] = frozenset()
    margin_eligible: frozenset[str] = frozenset()
    industries: Mapping[str, str] = field(default_factory=dict)

    def is_suspended(self, snapshot: StockSnapshot) -> bool:
        return snapshot.id in self.suspended or snapshot.ticker in self.suspended

    def is_margin_eligible(self, snapshot: StockSnapshot) -> bool:
        return (
            snapshot.id in self.margin_eligible
            or snapshot.ticker in self.margin_eligible
        )

    def industry_of(self, snapshot: StockSnapshot) -> str | None:
        industry = self.industries.get(snapshot.ticker)
        if industry is None:
            industry = self.industries.get(snapshot.id)
        return industry


@dataclass(frozen=True)
class PortfolioHolding:
    """An open position as tracked by the calling application.

    Prices are refreshed externally between evaluations; the alert engine
    only reads them. ``initial_score`` and ``breakdown`` capture what the
    screener said at entry time.
    """

    id: str
    ticker: str
    entry_price: float
    current_price: float
    shares: float = 0.0
    name: str = ""
    direction: Direction = "long"
    initial_score: float | None = None
    breakdown: object | None = None
    layer_scores: object | None = None
    strategy: str | None = None

    @property
    def gain(self) -> float:
        """Fractional P&L where positive is always favourable.

        Short positions gain when the price falls. A non-positive entry
        price yields 0.0.
        """
        if self.entry_price <= 0:
            return 0.0
        if self.direction == "short":
            return (self.entry_price - self.current_price) / self.entry_price
        return (self.current_price - self.entry_price) / self.entry_price
