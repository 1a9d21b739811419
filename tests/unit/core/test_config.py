"""Unit tests for core configuration module."""
from pathlib import Path

import pytest
from pydantic import ValidationError

from stockscout.core.config import (
    AlertConfig,
    PortfolioThresholds,
    PrefilterConfig,
    QualityGateConfig,
    ScreenerThresholds,
    ScreeningConfig,
    Settings,
    StrategySettings,
    WeightsConfig,
    load_settings,
)
from stockscout.core.exceptions import ConfigError

_SAMPLE_CONFIG = Path(__file__).resolve().parents[3] / "config" / "settings.yaml"


def test_load_config_from_yaml(tmp_path):
    """Test loading configuration from YAML file."""
    yaml_content = """
system:
  name: "TestScout"
  log_level: "DEBUG"
strategy:
  name: "Aggressive"
  screener:
    min_revenue_growth: 20
    volume_multiplier: 2.0
  portfolio:
    stop_loss: 0.05
    take_profit: 0.25
screening:
  top_n: 5
"""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(yaml_content)

    settings = load_settings(config_file)
    assert settings.system.name == "TestScout"
    assert settings.system.log_level == "DEBUG"
    assert settings.strategy.name == "Aggressive"
    assert settings.strategy.screener.min_revenue_growth == 20
    assert settings.strategy.screener.volume_multiplier == 2.0
    assert settings.strategy.portfolio.stop_loss == 0.05
    assert settings.strategy.portfolio.take_profit == 0.25
    assert settings.screening.top_n == 5


def test_sample_config_loads():
    """The shipped config/settings.yaml matches the model defaults."""
    settings = load_settings(_SAMPLE_CONFIG)
    assert settings.strategy == StrategySettings()
    assert settings.screening == ScreeningConfig()
    assert settings.alerts == AlertConfig()


def test_settings_defaults():
    """Test default Settings configuration."""
    settings = Settings()
    assert settings.system.log_level == "INFO"
    assert settings.quality_gate.threshold == 5
    assert settings.screening.primary_threshold == 0.8
    assert settings.screening.relaxed_threshold == 0.6
    assert settings.screening.top_n == 10
    assert settings.prefilter.enabled is False


def test_strategy_settings_defaults():
    """Defaults match the original default preset."""
    s = StrategySettings()
    assert s.weights.ma_uptrend == 0.15
    assert s.weights.revenue_growth == 0.25
    assert s.weights.active_odd_lot_trading == 0.20
    assert s.screener.min_revenue_growth == 10.0
    assert s.screener.volume_multiplier == 1.5
    assert s.screener.min_score == 70.0
    assert s.screener.min_odd_lot_volume == 10_000.0
    assert s.portfolio.stop_loss == 0.08
    assert s.portfolio.take_profit == 0.15


def test_strategy_settings_is_immutable():
    s = StrategySettings()
    with pytest.raises(ValidationError):
        s.name = "Changed"


def test_alert_config_defaults():
    cfg = AlertConfig()
    assert cfg.review_weekday == 4
    assert cfg.warning_fraction == 0.6
    assert cfg.min_history == 20
    assert cfg.timezone == "Asia/Taipei"


def test_quality_gate_config_includes_twse_industries():
    cfg = QualityGateConfig()
    assert "半導體業" in cfg.focus_industries
    assert "Semiconductors" in cfg.focus_industries


def test_prefilter_config_defaults():
    cfg = PrefilterConfig()
    assert cfg.min_trade_value == 10_000_000
    assert cfg.max_candidates == 300


class TestValidation:
    """Malformed settings are rejected at construction time."""

    @pytest.mark.parametrize("value", [0.0, 1.0, -0.1, 1.5])
    def test_stop_loss_out_of_range(self, value):
        with pytest.raises(ValidationError):
            PortfolioThresholds(stop_loss=value)

    def test_non_positive_volume_multiplier(self):
        with pytest.raises(ValidationError):
            ScreenerThresholds(volume_multiplier=0)

    def test_weight_above_one(self):
        with pytest.raises(ValidationError):
            WeightsConfig(volume_spike=1.5)

    def test_relaxed_above_primary(self):
        with pytest.raises(ValidationError):
            ScreeningConfig(primary_threshold=0.6, relaxed_threshold=0.8)

    def test_zero_top_n(self):
        with pytest.raises(ValidationError):
            ScreeningConfig(top_n=0)

    def test_review_weekday_out_of_range(self):
        with pytest.raises(ValidationError):
            AlertConfig(review_weekday=7)

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings.model_validate({"system": {"log_level": "TRACE"}})


def test_settings_partial_config(tmp_path):
    """Test Settings with partial configuration (using defaults for rest)."""
    config_file = tmp_path / "minimal_config.yaml"
    config_file.write_text('system:\n  name: "Minimal"\n')

    settings = load_settings(config_file)
    assert settings.system.name == "Minimal"
    assert settings.strategy.portfolio.stop_loss == 0.08
    assert settings.quality_gate.threshold == 5


def test_load_settings_empty_file(tmp_path):
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("")
    assert load_settings(config_file) == Settings()


def test_load_settings_file_not_found(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")


def test_load_settings_non_mapping_root(tmp_path):
    config_file = tmp_path / "list.yaml"
    config_file.write_text("- a\n- b\n")
    with pytest.raises(ConfigError):
        load_settings(config_file)
