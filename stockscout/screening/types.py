"""Shared data types for the screening pipeline.

These types pass structured results from the quality gate through the
strategy scorers to the orchestrator and on to the calling application.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

import pandas as pd

from stockscout.core.types import StockSnapshot

if TYPE_CHECKING:
    from stockscout.screening.strategies import ScoreBreakdown, Strategy


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounding up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


@dataclass
class QualityGateResult:
    """Outcome of the quality gate for one snapshot.

    Attributes:
        snapshot: The scored snapshot.
        score: Additive quality score; -999 for suspended issuers.
        reasons: Ordered (reason, delta) pairs explaining the score.
        passed: Whether the score reached the gate threshold.
    """

    snapshot: StockSnapshot
    score: int = 0
    reasons: list[tuple[str, int]] = field(default_factory=list)
    passed: bool = False

    @property
    def ticker(self) -> str:
        return self.snapshot.ticker


@dataclass
class LayerScores:
    """Four-axis scores left for the caller to populate."""

    fundamentals: float = 0.0
    technicals: float = 0.0
    momentum: float = 0.0
    risk: float = 0.0


@dataclass
class ScoredCandidate:
    """A gate-passed snapshot that fired the selected strategy.

    Attributes:
        snapshot: The underlying snapshot.
        strategy: Strategy that produced the score.
        raw_score: Unrounded strategy score, used for ordering.
        score: ``raw_score`` rounded half-up for display.
        breakdown: Condition record explaining the score.
        layer_scores: Four-axis scores, populated downstream.
        rank: Final rank position (1 = best).
    """

    snapshot: StockSnapshot
    strategy: Strategy
    raw_score: float
    breakdown: ScoreBreakdown
    score: int = 0
    layer_scores: LayerScores = field(default_factory=LayerScores)
    rank: int = 0

    @property
    def ticker(self) -> str:
        return self.snapshot.ticker


class ScreeningOutcome(Enum):
    """Structured reason for how a screening run ended."""

    OK = "OK"
    EMPTY_UNIVERSE = "EMPTY_UNIVERSE"
    NO_GATE_PASSERS = "NO_GATE_PASSERS"
    NO_STRATEGY_HITS = "NO_STRATEGY_HITS"


_FRAME_COLUMNS = [
    "rank",
    "id",
    "ticker",
    "name",
    "strategy",
    "score",
    "raw_score",
    "conditions_met",
    "conditions_total",
    "close",
    "trade_value",
]


@dataclass
class ScreeningResult:
    """Complete result of one screening run.

    Attributes:
        strategy: Strategy the run used.
        outcome: OK, or why nothing was returned.
        candidates: Ranked candidates, at most ``top_n``.
        gate_results: Quality gate result for every screened snapshot.
        gate_passed: Number of snapshots that passed the gate.
        threshold_used: Condition ratio of the pass that produced the result.
        relaxed: True if the relaxed retry ran.
        universe_size: Snapshots handed to the quality gate.
        run_at: UTC timestamp of the run.
    """

    strategy: Strategy
    outcome: ScreeningOutcome
    candidates: list[ScoredCandidate] = field(default_factory=list)
    gate_results: list[QualityGateResult] = field(default_factory=list)
    gate_passed: int = 0
    threshold_used: float = 0.0
    relaxed: bool = False
    universe_size: int = 0
    run_at: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return not self.candidates

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-serializable dict."""
        return {
            "strategy": self.strategy.value,
            "outcome": self.outcome.value,
            "run_at": self.run_at.isoformat() if self.run_at else None,
            "universe_size": self.universe_size,
            "gate_passed": self.gate_passed,
            "threshold_used": self.threshold_used,
            "relaxed": self.relaxed,
            "candidates": [
                {
                    "rank": c.rank,
                    "id": c.snapshot.id,
                    "ticker": c.ticker,
                    "name": c.snapshot.name,
                    "score": c.score,
                    "raw_score": round(c.raw_score, 4),
                    "breakdown": c.breakdown.conditions(),
                    "layer_scores": {
                        "fundamentals": c.layer_scores.fundamentals,
                        "technicals": c.layer_scores.technicals,
                        "momentum": c.layer_scores.momentum,
                        "risk": c.layer_scores.risk,
                    },
                }
                for c in self.candidates
            ],
        }

    def to_frame(self) -> pd.DataFrame:
        """Ranked candidate table, one row per candidate."""
        if not self.candidates:
            return pd.DataFrame(columns=_FRAME_COLUMNS)
        rows = [
            {
                "rank": c.rank,
                "id": c.snapshot.id,
                "ticker": c.ticker,
                "name": c.snapshot.name,
                "strategy": c.strategy.value,
                "score": c.score,
                "raw_score": c.raw_score,
                "conditions_met": c.breakdown.met,
                "conditions_total": c.breakdown.total,
                "close": c.snapshot.last_close,
                "trade_value": c.snapshot.trade_value,
            }
            for c in self.candidates
        ]
        return pd.DataFrame(rows, columns=_FRAME_COLUMNS)
