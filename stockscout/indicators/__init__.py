from stockscout.indicators.moving_average import moving_average, price_momentum
from stockscout.indicators.volatility import true_range_volatility
from stockscout.indicators.volume import average_volume, volume_ratio

__all__ = [
    "moving_average",
    "price_momentum",
    "average_volume",
    "volume_ratio",
    "true_range_volatility",
]
