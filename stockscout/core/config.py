"""Core configuration management module."""
from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from stockscout.core.exceptions import ConfigError


class SystemConfig(BaseModel):
    """System-level configuration."""

    model_config = ConfigDict(use_enum_values=True)

    name: str = "StockScout"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_dir: str | None = None


class WeightsConfig(BaseModel):
    """Per-axis scoring weights carried alongside a strategy preset."""

    model_config = ConfigDict(use_enum_values=True)

    ma_uptrend: float = 0.15
    revenue_growth: float = 0.25
    breakout_5ma: float = 0.15
    volume_spike: float = 0.15
    low_volatility: float = 0.10
    active_odd_lot_trading: float = 0.20

    @field_validator("*")
    @classmethod
    def validate_weight(cls, v: float) -> float:
        """Validate that each weight is between 0 and 1."""
        if not 0 <= v <= 1:
            raise ValueError("weights must be between 0 and 1")
        return v


class ScreenerThresholds(BaseModel):
    """Screener thresholds used by the strategy scorers."""

    model_config = ConfigDict(use_enum_values=True)

    min_revenue_growth: float = 10.0
    volume_multiplier: float = 1.5
    min_score: float = 70.0
    min_odd_lot_volume: float = 10_000.0

    @field_validator("volume_multiplier")
    @classmethod
    def validate_multiplier(cls, v: float) -> float:
        """Validate that volume_multiplier is positive."""
        if v <= 0:
            raise ValueError("volume_multiplier must be positive")
        return v


class PortfolioThresholds(BaseModel):
    """Stop-loss / take-profit fractions for the alert engine."""

    model_config = ConfigDict(use_enum_values=True)

    stop_loss: float = 0.08
    take_profit: float = 0.15

    @field_validator("stop_loss", "take_profit")
    @classmethod
    def validate_fraction(cls, v: float) -> float:
        """Validate that the fraction is between 0 and 1."""
        if not 0 < v < 1:
            raise ValueError("Percentage values must be between 0 and 1")
        return v


class StrategySettings(BaseModel):
    """User-tunable strategy preset supplied per screening/alert run."""

    model_config = ConfigDict(use_enum_values=True, frozen=True)

    name: str = "Default"
    weights: WeightsConfig = WeightsConfig()
    screener: ScreenerThresholds = ScreenerThresholds()
    portfolio: PortfolioThresholds = PortfolioThresholds()


class ScreeningConfig(BaseModel):
    """Orchestrator thresholds.

    ``primary_threshold`` and ``relaxed_threshold`` are condition-
    satisfaction ratios; the relaxed pass runs at most once.
    """

    model_config = ConfigDict(use_enum_values=True)

    primary_threshold: float = 0.8
    relaxed_threshold: float = 0.6
    top_n: int = 10

    @field_validator("primary_threshold", "relaxed_threshold")
    @classmethod
    def validate_ratio(cls, v: float) -> float:
        """Validate that a ratio threshold is in (0, 1]."""
        if not 0 < v <= 1:
            raise ValueError("threshold ratios must be in (0, 1]")
        return v

    @field_validator("top_n")
    @classmethod
    def validate_top_n(cls, v: int) -> int:
        """Validate that top_n is positive."""
        if v <= 0:
            raise ValueError("top_n must be positive")
        return v

    @model_validator(mode="after")
    def validate_relaxation(self) -> "ScreeningConfig":
        if self.relaxed_threshold > self.primary_threshold:
            raise ValueError("relaxed_threshold must not exceed primary_threshold")
        return self


class QualityGateConfig(BaseModel):
    """Quality gate threshold and industry focus list.

    Industry names follow the TWSE classification; English aliases are
    accepted as well so non-TWSE reference data can be plugged in.
    """

    model_config = ConfigDict(use_enum_values=True)

    threshold: int = 5
    focus_industries: list[str] = [
        "半導體業",
        "電子零組件業",
        "電腦及週邊設備業",
        "光電業",
        "通信網路業",
        "其他電子業",
        "Semiconductors",
        "Electronic Components",
        "Computer & Peripheral Equipment",
        "Optoelectronics",
        "Communications & Internet",
        "Other Electronics",
    ]


class PrefilterConfig(BaseModel):
    """Liquidity pre-screen applied before the quality gate."""

    model_config = ConfigDict(use_enum_values=True)

    enabled: bool = False
    min_trade_value: float = 10_000_000.0
    max_candidates: int = 300

    @field_validator("max_candidates")
    @classmethod
    def validate_max_candidates(cls, v: int) -> int:
        """Validate that max_candidates is positive."""
        if v <= 0:
            raise ValueError("max_candidates must be positive")
        return v


class AlertConfig(BaseModel):
    """Portfolio alert engine calendar and history settings."""

    model_config = ConfigDict(use_enum_values=True)

    review_weekday: int = 4  # 0=Mon, 4=Fri
    warning_fraction: float = 0.6
    min_history: int = 20
    timezone: str = "Asia/Taipei"

    @field_validator("review_weekday")
    @classmethod
    def validate_weekday(cls, v: int) -> int:
        """Validate that review_weekday is a Python weekday number."""
        if not 0 <= v <= 6:
            raise ValueError("review_weekday must be between 0 and 6")
        return v

    @field_validator("warning_fraction")
    @classmethod
    def validate_warning_fraction(cls, v: float) -> float:
        """Validate that warning_fraction is between 0 and 1."""
        if not 0 < v < 1:
            raise ValueError("warning_fraction must be between 0 and 1")
        return v


class Settings(BaseModel):
    """Root settings configuration."""

    model_config = ConfigDict(use_enum_values=True)

    system: SystemConfig = SystemConfig()
    strategy: StrategySettings = StrategySettings()
    screening: ScreeningConfig = ScreeningConfig()
    quality_gate: QualityGateConfig = QualityGateConfig()
    prefilter: PrefilterConfig = PrefilterConfig()
    alerts: AlertConfig = AlertConfig()


def load_settings(path: Path | str) -> Settings:
    """Load settings from a YAML configuration file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Settings instance with loaded configuration.

    Raises:
        FileNotFoundError: If configuration file does not exist.
        yaml.YAMLError: If YAML is invalid.
        ConfigError: If the YAML root is not a mapping.
        ValueError: If configuration is invalid.
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        raw_config = yaml.safe_load(f)

    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigError(f"Configuration root must be a mapping: {config_path}")

    return Settings.model_validate(raw_config)
