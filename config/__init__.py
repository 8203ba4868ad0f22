"""
Configuration module for the application.
Exports the settings instances for use throughout the application.
"""

from config.settings import settings
from config.rate_limit_config import rate_limit_settings

__all__ = ["settings", "rate_limit_settings"]
