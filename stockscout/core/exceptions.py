"""Core exception hierarchy for StockScout.

The scoring engine itself degrades gracefully on thin or missing data, so
these exceptions are raised only at the boundaries: configuration loading
and strategy selection by the calling layer.
"""


class StockScoutError(Exception):
    """Base exception class for all StockScout errors.

    Callers can catch every engine error with a single except clause.
    """


class ConfigError(StockScoutError):
    """Configuration-related errors.

    Raised when a settings file is structurally unusable, e.g. the YAML
    root is not a mapping. Field-level problems surface as pydantic
    validation errors instead.
    """


class DataError(StockScoutError):
    """Snapshot data that cannot be interpreted at all.

    Thin history or missing fundamentals are NOT data errors; they are
    scored as zero/neutral.
    """


class StrategyError(StockScoutError):
    """Unknown or unsupported screening strategy.

    Attributes:
        key: The strategy key that could not be resolved.
    """

    def __init__(self, key: str):
        """Initialize StrategyError with the offending key.

        Args:
            key: Strategy key as supplied by the caller (e.g. "MOMENTUM").
        """
        super().__init__(f"Unknown screening strategy: {key!r}")
        self.key = key
