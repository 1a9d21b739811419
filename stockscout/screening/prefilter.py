from __future__ import annotations

import logging
from typing import Iterable, Sequence

from stockscout.core.types import StockSnapshot

logger = logging.getLogger(__name__)


def liquidity_prefilter(
    snapshots: Sequence[StockSnapshot],
    min_trade_value: float = 10_000_000,
    limit: int = 300,
) -> list[StockSnapshot]:
    """Keep the most actively traded snapshots.

    Drops anything at or below ``min_trade_value``, orders the rest by trade
    value descending (ticker breaks ties) and keeps the first ``limit``.
    """
    liquid = [s for s in snapshots if (s.trade_value or 0) > min_trade_value]
    liquid.sort(key=lambda s: (-(s.trade_value or 0), s.ticker))
    kept = liquid[:limit]
    logger.debug(
        "liquidity_prefilter: %d -> %d (min_trade_value=%.0f, limit=%d)",
        len(snapshots),
        len(kept),
        min_trade_value,
        limit,
    )
    return kept


def apply_allowlist(
    snapshots: Sequence[StockSnapshot],
    allowed: Iterable[str],
) -> list[StockSnapshot]:
    """Keep snapshots whose id or ticker appears in ``allowed``.

    Used to consume an externally produced shortlist; input order is kept.
    """
    allowed_set = set(allowed)
    return [s for s in snapshots if s.id in allowed_set or s.ticker in allowed_set]
