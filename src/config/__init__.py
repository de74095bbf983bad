"""Configuration module -- exports Settings, load_config and the built-in defaults."""

from src.config.loader import DEFAULT_CONFIG, load_config
from src.config.settings import Settings

__all__ = ["DEFAULT_CONFIG", "Settings", "load_config"]
