"""
Recurring-Revenue Analytics Engine
Configuration Module
"""
from .settings import MetricsSettings, Settings, get_settings

__all__ = ["MetricsSettings", "Settings", "get_settings"]
