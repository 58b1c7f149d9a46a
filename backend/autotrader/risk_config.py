"""Risk configuration loaded from risk.yaml.

Example:
    enabled: true
    buy_threshold: 0.7
    sell_threshold: -0.7
    max_position_size: 100
    max_position_value: 10000
    instrument_universe: [AAPL, MSFT, GOOGL]

A missing file yields the defaults. A file that cannot be parsed or fails
validation yields the safe default with auto-trading disabled.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from autotrader.config import get_settings
from quantcore.models import RiskConfig

logger = logging.getLogger(__name__)


def load_risk_config(path: Path | None = None) -> RiskConfig:
    """Load risk config from a YAML file."""
    config_path = path or get_settings().risk_config_path

    if not config_path.exists():
        logger.info(
            "No risk config found at %s, using defaults (auto-trading disabled)",
            config_path,
        )
        return RiskConfig()

    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"expected a mapping, got {type(raw).__name__}")
        config = RiskConfig(**raw)
    except (OSError, yaml.YAMLError, ValidationError, ValueError, TypeError) as e:
        logger.warning(
            "Invalid risk config at %s, auto-trading disabled: %s", config_path, e
        )
        return RiskConfig.disabled_default()

    logger.info(
        "Loaded risk config: enabled=%s, buy>%.2f, sell<%.2f, "
        "max %d shares / $%.2f, %d instruments",
        config.enabled,
        config.buy_threshold,
        config.sell_threshold,
        config.max_position_size,
        config.max_position_value,
        len(config.instrument_universe),
    )
    return config


def save_risk_config(config: RiskConfig, path: Path | None = None) -> Path:
    """Write risk config to a YAML file and return its path."""
    config_path = path or get_settings().risk_config_path
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.safe_dump(config.model_dump(), f, sort_keys=False)

    logger.info("Saved risk config to %s", config_path)
    return config_path
