"""QualityGate: first-stage additive filter for the screening pipeline.

Each rule adds points independently; there is no cap and no early exit
apart from the suspended-trading short-circuit. The score is a
completeness-plus-quality heuristic, not a valuation model.

Rules (points):
    suspended trading            -> -999, stop
    revenue growth > 30% / > 10% -> +2 / +1
    3+ consecutive growth months -> +1
    trade value > 50M            -> +1
    volume > 1.5x 20-day average -> +1
    P/E > 0                      -> +1
    implied EPS (close/PE) > 2   -> +2
    focus industry               -> +1
    ROE > 15% / > 10%            -> +2 / +1
    debt ratio < 50%             -> +1
    yield > 6% / > 4%            -> +2 / +1
    0 < P/E < 20                 -> +1
    margin eligible              -> +1
    ROE reported                 -> +1
    yield reported               -> +1
"""
from __future__ import annotations

import logging
from typing import Sequence

from stockscout.core.config import QualityGateConfig
from stockscout.core.types import ReferenceSets, StockSnapshot
from stockscout.indicators.volume import average_volume
from stockscout.screening.types import QualityGateResult

logger = logging.getLogger(__name__)

SUSPENDED_SCORE = -999

_TRADE_VALUE_FLOOR = 50_000_000
_VOLUME_SPIKE_MULT = 1.5
_VOLUME_WINDOW = 20
_IMPLIED_EPS_FLOOR = 2.0
_CONSECUTIVE_GROWTH_MONTHS = 3

_EMPTY_REFERENCE = ReferenceSets()


class QualityGate:
    """Scores snapshots and filters them by a fixed threshold.

    Usage::

        gate = QualityGate()
        passed, results = gate.filter(snapshots, reference)
    """

    def __init__(self, config: QualityGateConfig | None = None) -> None:
        self._config = config or QualityGateConfig()
        self._focus = frozenset(self._config.focus_industries)

    @property
    def threshold(self) -> int:
        return self._config.threshold

    def score(
        self,
        snapshot: StockSnapshot,
        reference: ReferenceSets | None = None,
    ) -> QualityGateResult:
        """Score one snapshot against every quality rule.

        Args:
            snapshot: The snapshot to score.
            reference: External lookup sets; missing sets count as empty.

        Returns:
            QualityGateResult with the score, reason trail and pass flag.
        """
        ref = reference or _EMPTY_REFERENCE

        if ref.is_suspended(snapshot):
            return QualityGateResult(
                snapshot=snapshot,
                score=SUSPENDED_SCORE,
                reasons=[("suspended_trading", SUSPENDED_SCORE)],
                passed=False,
            )

        reasons: list[tuple[str, int]] = []

        growth = snapshot.revenue_growth
        if growth is not None:
            if growth > 30:
                reasons.append(("revenue_growth_gt_30", 2))
            elif growth > 10:
                reasons.append(("revenue_growth_gt_10", 1))
        if snapshot.consecutive_revenue_growth_months >= _CONSECUTIVE_GROWTH_MONTHS:
            reasons.append(("consecutive_revenue_growth", 1))

        if (snapshot.trade_value or 0) > _TRADE_VALUE_FLOOR:
            reasons.append(("trade_value_gt_50m", 1))
        if self._has_volume_spike(snapshot):
            reasons.append(("volume_spike", 1))

        pe = snapshot.pe_ratio
        if pe is not None and pe > 0:
            reasons.append(("positive_pe", 1))
            if snapshot.last_close / pe > _IMPLIED_EPS_FLOOR:
                reasons.append(("implied_eps_gt_2", 2))

        industry = ref.industry_of(snapshot)
        if industry is not None and industry in self._focus:
            reasons.append(("focus_industry", 1))

        roe = snapshot.roe
        if roe is not None:
            if roe > 15:
                reasons.append(("roe_gt_15", 2))
            elif roe > 10:
                reasons.append(("roe_gt_10", 1))
        if snapshot.debt_ratio is not None and snapshot.debt_ratio < 50:
            reasons.append(("debt_ratio_lt_50", 1))

        dy = snapshot.dividend_yield
        if dy is not None:
            if dy > 6:
                reasons.append(("yield_gt_6", 2))
            elif dy > 4:
                reasons.append(("yield_gt_4", 1))
        if pe is not None and 0 < pe < 20:
            reasons.append(("pe_lt_20", 1))

        if snapshot.margin_trading or ref.is_margin_eligible(snapshot):
            reasons.append(("margin_eligible", 1))

        # Data-completeness bonuses
        if roe is not None:
            reasons.append(("roe_reported", 1))
        if dy is not None:
            reasons.append(("yield_reported", 1))

        total = sum(delta for _, delta in reasons)
        return QualityGateResult(
            snapshot=snapshot,
            score=total,
            reasons=reasons,
            passed=total >= self.threshold,
        )

    def filter(
        self,
        snapshots: Sequence[StockSnapshot],
        reference: ReferenceSets | None = None,
    ) -> tuple[list[StockSnapshot], list[QualityGateResult]]:
        """Score every snapshot and return the passers plus all results.

        Input order is preserved in both lists.
        """
        results = [self.score(s, reference) for s in snapshots]
        passed = [r.snapshot for r in results if r.passed]
        suspended = sum(1 for r in results if r.score == SUSPENDED_SCORE)
        logger.info(
            "QualityGate: %d snapshots -> %d passed (threshold=%d, suspended=%d)",
            len(results),
            len(passed),
            self.threshold,
            suspended,
        )
        return passed, results

    @staticmethod
    def _has_volume_spike(snapshot: StockSnapshot) -> bool:
        volumes = snapshot.volumes
        if len(volumes) < _VOLUME_WINDOW + 1:
            return False
        baseline = average_volume(volumes, _VOLUME_WINDOW)
        return volumes[-1] > baseline * _VOLUME_SPIKE_MULT
