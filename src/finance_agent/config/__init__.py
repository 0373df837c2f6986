"""Configuration module for the finance agent."""

from finance_agent.config.logging import configure_logging, get_logger
from finance_agent.config.settings import FlatSettings, get_settings

__all__ = ["FlatSettings", "get_settings", "configure_logging", "get_logger"]
