"""Configuration module for nudge."""

from nudge.config.loader import load_config, get_config_path
from nudge.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
