"""Shared pytest fixtures."""
from __future__ import annotations

from pathlib import Path

import pytest

from stockscout.core.config import Settings, StrategySettings, load_settings

SAMPLE_CONFIG = Path(__file__).resolve().parents[1] / "config" / "settings.yaml"


@pytest.fixture
def settings() -> Settings:
    """Settings loaded from the bundled config/settings.yaml."""
    return load_settings(SAMPLE_CONFIG)


@pytest.fixture
def strategy_settings(settings: Settings) -> StrategySettings:
    return settings.strategy
