"""
Configuration module for the casbin rule adapter.
"""

from casbin_rule_adapter.config.settings import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
