"""Screener: runs the two-stage screening pipeline for one strategy.

Pipeline:
    1. Optional liquidity pre-filter and external allowlist.
    2. QualityGate over the whole universe. Nothing passes -> empty result.
    3. Strategy scorer over gate-passers at the primary ratio (0.8).
    4. If no candidate scored > 0, ONE retry at the relaxed ratio (0.6)
       over the same gate-passed set. The retry is all-or-nothing: it runs
       only when the whole set came back empty, never per candidate.
    5. Sort by score descending (ticker breaks ties), keep the top N,
       assign ranks and round scores half-up for display.

Empty outcomes are reported through ScreeningOutcome, never raised.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Sequence

from stockscout.core.config import (
    PrefilterConfig,
    QualityGateConfig,
    ScreeningConfig,
    StrategySettings,
)
from stockscout.core.types import ReferenceSets, StockSnapshot
from stockscout.screening.prefilter import apply_allowlist, liquidity_prefilter
from stockscout.screening.quality_gate import QualityGate
from stockscout.screening.strategies import Strategy, evaluate
from stockscout.screening.types import (
    ScoredCandidate,
    ScreeningOutcome,
    ScreeningResult,
    round_half_up,
)

logger = logging.getLogger(__name__)


class Screener:
    """Quality gate followed by a strategy scorer with one relaxation retry.

    Usage::

        screener = Screener(settings.screening, settings.quality_gate)
        result = screener.run(snapshots, Strategy.GROWTH, strategy_settings, reference)
    """

    def __init__(
        self,
        config: ScreeningConfig | None = None,
        gate_config: QualityGateConfig | None = None,
        prefilter_config: PrefilterConfig | None = None,
    ) -> None:
        self._config = config or ScreeningConfig()
        self._gate = QualityGate(gate_config)
        self._prefilter = prefilter_config or PrefilterConfig()

    def run(
        self,
        snapshots: Sequence[StockSnapshot],
        strategy: Strategy,
        settings: StrategySettings | None = None,
        reference: ReferenceSets | None = None,
        allowlist: Iterable[str] | None = None,
    ) -> ScreeningResult:
        """Screen ``snapshots`` and return the ranked shortlist.

        Args:
            snapshots: Candidate universe.
            strategy: Strategy used for the second stage.
            settings: Strategy settings for this run; defaults apply if None.
            reference: Suspended / margin / industry lookups.
            allowlist: Optional ids/tickers from an external pre-selection;
                only these are screened when given.

        Returns:
            ScreeningResult; check ``outcome`` for why it may be empty.
        """
        settings = settings or StrategySettings()
        run_at = datetime.now(timezone.utc)

        universe = list(snapshots)
        if allowlist is not None:
            universe = apply_allowlist(universe, allowlist)
        if self._prefilter.enabled:
            universe = liquidity_prefilter(
                universe,
                min_trade_value=self._prefilter.min_trade_value,
                limit=self._prefilter.max_candidates,
            )

        if not universe:
            logger.warning("Screener[%s]: empty universe, nothing to screen", strategy.value)
            return ScreeningResult(
                strategy=strategy,
                outcome=ScreeningOutcome.EMPTY_UNIVERSE,
                run_at=run_at,
            )

        passed, gate_results = self._gate.filter(universe, reference)
        result = ScreeningResult(
            strategy=strategy,
            outcome=ScreeningOutcome.OK,
            gate_results=gate_results,
            gate_passed=len(passed),
            universe_size=len(universe),
            run_at=run_at,
        )

        if not passed:
            logger.warning(
                "Screener[%s]: no snapshot passed the quality gate (%d screened)",
                strategy.value,
                len(universe),
            )
            result.outcome = ScreeningOutcome.NO_GATE_PASSERS
            return result

        threshold = self._config.primary_threshold
        hits = self._score_all(passed, strategy, threshold, settings)
        if not hits:
            threshold = self._config.relaxed_threshold
            result.relaxed = True
            logger.info(
                "Screener[%s]: no hits at %.2f, retrying once at %.2f",
                strategy.value,
                self._config.primary_threshold,
                threshold,
            )
            hits = self._score_all(passed, strategy, threshold, settings)

        result.threshold_used = threshold
        if not hits:
            logger.warning(
                "Screener[%s]: no strategy hits among %d gate-passers",
                strategy.value,
                len(passed),
            )
            result.outcome = ScreeningOutcome.NO_STRATEGY_HITS
            return result

        hits.sort(key=lambda c: (-c.raw_score, c.ticker))
        top = hits[: self._config.top_n]
        for i, cand in enumerate(top, start=1):
            cand.rank = i
            cand.score = round_half_up(cand.raw_score)
        result.candidates = top

        logger.info(
            "Screener[%s]: %d universe -> %d gate -> %d hits -> %d ranked (threshold=%.2f)",
            strategy.value,
            len(universe),
            len(passed),
            len(hits),
            len(top),
            threshold,
        )
        for cand in top:
            logger.debug(
                "  Rank %2d: %-10s score=%.2f conditions=%d/%d",
                cand.rank,
                cand.ticker,
                cand.raw_score,
                cand.breakdown.met,
                cand.breakdown.total,
            )
        return result

    @staticmethod
    def _score_all(
        passed: Sequence[StockSnapshot],
        strategy: Strategy,
        threshold: float,
        settings: StrategySettings,
    ) -> list[ScoredCandidate]:
        hits: list[ScoredCandidate] = []
        for snapshot in passed:
            scored = evaluate(strategy, snapshot, threshold, settings)
            if scored.score > 0:
                hits.append(
                    ScoredCandidate(
                        snapshot=snapshot,
                        strategy=strategy,
                        raw_score=scored.score,
                        breakdown=scored.breakdown,
                    )
                )
        return hits
