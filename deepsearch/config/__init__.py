"""Configuration module."""

from deepsearch.config.logging_config import configure_logging
from deepsearch.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "configure_logging"]
