"""Configuration loading and validation module."""

from src.config.loader import ConfigValidationError, load_diversification_config
from src.config.schemas import DiversificationConfig


__all__ = [
    "ConfigValidationError",
    "DiversificationConfig",
    "load_diversification_config",
]
