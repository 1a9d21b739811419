"""Two-stage screening pipeline.

This package contains:
- QualityGate: additive quality/completeness filter
- Strategy scorers: Breakout, LongTerm, DayTrade, Value, Growth
- Screener: gate -> strategy -> relaxation retry -> top-N ranking
"""
from stockscout.screening.orchestrator import Screener
from stockscout.screening.quality_gate import QualityGate
from stockscout.screening.strategies import Strategy, StrategyScore, evaluate
from stockscout.screening.types import (
    LayerScores,
    QualityGateResult,
    ScoredCandidate,
    ScreeningOutcome,
    ScreeningResult,
)

__all__ = [
    "Screener",
    "QualityGate",
    "Strategy",
    "StrategyScore",
    "evaluate",
    "LayerScores",
    "QualityGateResult",
    "ScoredCandidate",
    "ScreeningOutcome",
    "ScreeningResult",
]
