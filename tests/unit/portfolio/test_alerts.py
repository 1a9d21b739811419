"""Unit tests for the portfolio alert engine (stockscout/portfolio/alerts.py)."""
from __future__ import annotations

from datetime import date

import pytest

from stockscout.core.config import AlertConfig, StrategySettings
from stockscout.portfolio.alerts import Alert, AlertKind, PortfolioMonitor, classify
from tests.factories import flat_closes, make_holding, make_klines, make_snapshot

SETTINGS = StrategySettings()
TUESDAY = date(2026, 1, 6)
FRIDAY = date(2026, 1, 9)


def _snapshot_at(closes: list[float], **overrides):
    return make_snapshot(klines=make_klines(closes), **overrides)


def _uptrend() -> list[float]:
    """MA5 = 96, MA20 = 90."""
    return [88.0] * 15 + [96.0] * 5


def _rolling_over() -> list[float]:
    """MA5 = 118, MA20 = 127."""
    return [130.0] * 15 + [118.0] * 5


class TestTechnicalStop:
    def test_below_ma5_overrides_large_gain(self):
        snap = _snapshot_at(flat_closes(25, 120.0))
        alert = classify(make_holding(current_price=110.0), snap, SETTINGS, TUESDAY)
        assert alert.kind is AlertKind.STOP_LOSS
        assert alert.rule == "below_ma5"
        assert alert.gain == pytest.approx(0.10)

    def test_below_ma5_wins_on_friday(self):
        snap = _snapshot_at(flat_closes(25, 120.0))
        alert = classify(make_holding(current_price=110.0), snap, SETTINGS, FRIDAY)
        assert alert.kind is AlertKind.STOP_LOSS
        assert alert.rule == "below_ma5"

    def test_price_on_ma5_is_not_a_break(self):
        snap = _snapshot_at(flat_closes(25, 101.0))
        alert = classify(make_holding(current_price=101.0), snap, SETTINGS, TUESDAY)
        assert alert.rule == "monitor"

    def test_missing_ma5_never_fires(self):
        snap = _snapshot_at([120.0, 120.0, 120.0])
        alert = classify(make_holding(current_price=97.0), snap, SETTINGS, TUESDAY)
        assert alert.rule != "below_ma5"


class TestFixedStop:
    def test_loss_beyond_stop(self):
        snap = _snapshot_at(flat_closes(25, 90.0))
        alert = classify(make_holding(current_price=91.0), snap, SETTINGS, TUESDAY)
        assert alert.kind is AlertKind.STOP_LOSS
        assert alert.rule == "fixed_stop"

    def test_loss_exactly_at_stop(self):
        snap = _snapshot_at(flat_closes(25, 92.0))
        alert = classify(make_holding(current_price=92.0), snap, SETTINGS, TUESDAY)
        assert alert.rule == "fixed_stop"

    def test_fixed_stop_wins_on_friday(self):
        snap = _snapshot_at(flat_closes(25, 90.0))
        alert = classify(make_holding(current_price=91.0), snap, SETTINGS, FRIDAY)
        assert alert.rule == "fixed_stop"

    def test_custom_stop(self):
        settings = StrategySettings(portfolio={"stop_loss": 0.05, "take_profit": 0.15})
        snap = _snapshot_at(flat_closes(25, 94.0))
        alert = classify(make_holding(current_price=94.0), snap, settings, TUESDAY)
        assert alert.rule == "fixed_stop"


class TestFridayReview:
    def test_target_with_trend(self):
        snap = _snapshot_at(_uptrend())
        alert = classify(make_holding(current_price=120.0), snap, SETTINGS, FRIDAY)
        assert alert.kind is AlertKind.REVIEW
        assert alert.rule == "review_target_strong"

    def test_target_against_trend(self):
        snap = _snapshot_at(_rolling_over())
        alert = classify(make_holding(current_price=120.0), snap, SETTINGS, FRIDAY)
        assert alert.kind is AlertKind.REVIEW
        assert alert.rule == "review_target_weak"

    def test_in_profit(self):
        snap = _snapshot_at(flat_closes(25, 105.0))
        alert = classify(make_holding(current_price=105.0), snap, SETTINGS, FRIDAY)
        assert alert.kind is AlertKind.REVIEW
        assert alert.rule == "review_in_profit"

    def test_at_loss_inside_warning_band(self):
        # -5% would be a warning on any other day
        snap = _snapshot_at(flat_closes(25, 95.0))
        alert = classify(make_holding(current_price=95.0), snap, SETTINGS, FRIDAY)
        assert alert.kind is AlertKind.REVIEW
        assert alert.rule == "review_at_loss"

    def test_flat_position_is_review_at_loss(self):
        snap = _snapshot_at(flat_closes(25))
        alert = classify(make_holding(), snap, SETTINGS, FRIDAY)
        assert alert.rule == "review_at_loss"

    def test_only_review_or_hard_stop_on_friday(self):
        cases = [
            (flat_closes(25, 101.0), 101.0),
            (flat_closes(25, 95.0), 95.0),
            (_uptrend(), 120.0),
            (_rolling_over(), 120.0),
            (flat_closes(25, 120.0), 110.0),
            (flat_closes(25, 90.0), 91.0),
        ]
        for closes, price in cases:
            alert = classify(make_holding(current_price=price), _snapshot_at(closes), SETTINGS, FRIDAY)
            assert alert.kind is AlertKind.REVIEW or alert.rule in ("below_ma5", "fixed_stop")

    def test_review_weekday_is_configurable(self):
        snap = _snapshot_at(flat_closes(25, 105.0))
        config = AlertConfig(review_weekday=1)
        alert = classify(make_holding(current_price=105.0), snap, SETTINGS, TUESDAY, config)
        assert alert.kind is AlertKind.REVIEW
        friday = classify(make_holding(current_price=105.0), snap, SETTINGS, FRIDAY, config)
        assert friday.kind is AlertKind.HOLD


class TestWeekdayRules:
    def test_stop_warning(self):
        snap = _snapshot_at(flat_closes(25, 95.0))
        alert = classify(make_holding(current_price=95.0), snap, SETTINGS, TUESDAY)
        assert alert.kind is AlertKind.STOP_LOSS
        assert alert.rule == "stop_warning"

    def test_loss_above_warning_band_is_hold(self):
        snap = _snapshot_at(flat_closes(25, 96.0))
        alert = classify(make_holding(current_price=96.0), snap, SETTINGS, TUESDAY)
        assert alert.kind is AlertKind.HOLD
        assert alert.rule == "monitor"

    def test_ride_trend(self):
        snap = _snapshot_at(_uptrend())
        alert = classify(make_holding(current_price=120.0), snap, SETTINGS, TUESDAY)
        assert alert.kind is AlertKind.HOLD
        assert alert.rule == "ride_trend"
        assert alert.gain == pytest.approx(0.20)

    def test_target_hit(self):
        snap = _snapshot_at(_rolling_over())
        alert = classify(make_holding(current_price=120.0), snap, SETTINGS, TUESDAY)
        assert alert.kind is AlertKind.TAKE_PROFIT
        assert alert.rule == "target_hit"

    def test_target_boundary_inclusive(self):
        snap = _snapshot_at(flat_closes(25, 100.0))
        alert = classify(make_holding(current_price=115.0), snap, SETTINGS, TUESDAY)
        assert alert.rule == "target_hit"

    def test_monitor(self):
        snap = _snapshot_at(flat_closes(25))
        alert = classify(make_holding(current_price=101.0), snap, SETTINGS, TUESDAY)
        assert alert.kind is AlertKind.HOLD
        assert alert.rule == "monitor"
        assert alert.ticker == "2330"


class TestShortPositions:
    def test_price_above_ma5_stops_out(self):
        snap = _snapshot_at(flat_closes(25, 105.0))
        holding = make_holding(direction="short", current_price=110.0)
        alert = classify(holding, snap, SETTINGS, TUESDAY)
        assert alert.kind is AlertKind.STOP_LOSS
        assert alert.rule == "below_ma5"

    def test_fixed_stop_on_rise(self):
        snap = _snapshot_at(flat_closes(25, 115.0))
        holding = make_holding(direction="short", current_price=109.0)
        alert = classify(holding, snap, SETTINGS, TUESDAY)
        assert alert.rule == "fixed_stop"
        assert alert.gain == pytest.approx(-0.09)

    def test_ride_downtrend(self):
        # MA5 = 82, MA20 = 103
        snap = _snapshot_at([110.0] * 15 + [82.0] * 5)
        holding = make_holding(direction="short", current_price=80.0)
        alert = classify(holding, snap, SETTINGS, TUESDAY)
        assert alert.kind is AlertKind.HOLD
        assert alert.rule == "ride_trend"

    def test_target_hit_when_trend_turns_up(self):
        snap = _snapshot_at(flat_closes(25, 70.0))
        holding = make_holding(direction="short", current_price=70.0)
        alert = classify(holding, snap, SETTINGS, TUESDAY)
        assert alert.kind is AlertKind.TAKE_PROFIT


class TestAlertValues:
    def test_labels(self):
        assert AlertKind.STOP_LOSS.label == "停損"
        assert AlertKind.REVIEW.label == "週五複盤"

    def test_alert_is_immutable(self):
        alert = Alert(ticker="2330", kind=AlertKind.HOLD, message="m", rule="monitor")
        with pytest.raises(AttributeError):
            alert.kind = AlertKind.REVIEW

    def test_holding_not_mutated(self):
        holding = make_holding(current_price=110.0)
        classify(holding, _snapshot_at(flat_closes(25, 120.0)), SETTINGS, TUESDAY)
        assert holding == make_holding(current_price=110.0)

    def test_messages_include_gain(self):
        snap = _snapshot_at(flat_closes(25))
        alert = classify(make_holding(current_price=101.0), snap, SETTINGS, TUESDAY)
        assert "1.0%" in alert.message


class TestPortfolioMonitor:
    def test_one_alert_per_holding(self):
        snaps = [
            make_snapshot(id="A", ticker="A", klines=make_klines(flat_closes(25))),
            make_snapshot(id="B", ticker="B", klines=make_klines(flat_closes(25, 90.0))),
        ]
        holdings = [
            make_holding(id="A", ticker="A", current_price=101.0),
            make_holding(id="B", ticker="B", current_price=91.0),
        ]
        alerts = PortfolioMonitor().check(holdings, snaps, SETTINGS, TUESDAY)
        assert [(a.ticker, a.rule) for a in alerts] == [("A", "monitor"), ("B", "fixed_stop")]

    def test_skips_short_history(self):
        snaps = [make_snapshot(id="A", ticker="A", klines=make_klines(flat_closes(19)))]
        alerts = PortfolioMonitor().check([make_holding(id="A", ticker="A")], snaps, SETTINGS, TUESDAY)
        assert alerts == []

    def test_exactly_min_history_is_evaluated(self):
        snaps = [make_snapshot(id="A", ticker="A", klines=make_klines(flat_closes(20)))]
        alerts = PortfolioMonitor().check([make_holding(id="A", ticker="A")], snaps, SETTINGS, TUESDAY)
        assert len(alerts) == 1

    def test_skips_missing_snapshot(self):
        alerts = PortfolioMonitor().check([make_holding(id="X", ticker="X")], [], SETTINGS, TUESDAY)
        assert alerts == []

    def test_matches_by_ticker(self):
        snaps = [make_snapshot(id="2330", ticker="2330.TW", klines=make_klines(flat_closes(25)))]
        holding = make_holding(id="tsmc-lot-1", ticker="2330.TW", current_price=101.0)
        alerts = PortfolioMonitor().check([holding], snaps, SETTINGS, TUESDAY)
        assert [a.ticker for a in alerts] == ["2330.TW"]

    def test_accepts_mapping(self):
        snaps = {"A": make_snapshot(id="A", ticker="A", klines=make_klines(flat_closes(25)))}
        alerts = PortfolioMonitor().check([make_holding(id="A", ticker="A")], snaps, SETTINGS, FRIDAY)
        assert alerts[0].kind is AlertKind.REVIEW

    def test_custom_min_history(self):
        snaps = [make_snapshot(id="A", ticker="A", klines=make_klines(flat_closes(10)))]
        monitor = PortfolioMonitor(AlertConfig(min_history=5))
        alerts = monitor.check([make_holding(id="A", ticker="A")], snaps, SETTINGS, TUESDAY)
        assert len(alerts) == 1
