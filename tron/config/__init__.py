"""
Tron Configuration Module

This module handles loading and validation of tron.yaml. It supports
YAML-based configuration with environment variable overrides and
pydantic validation.

Author: Tron Project
License: MIT
"""

from .schema import TronConfig, DotfilesConfig, ConfigEntry, LoggingConfig, LogLevel
from .config_loader import ConfigLoader, load_config

__all__ = [
    'TronConfig', 'DotfilesConfig', 'ConfigEntry', 'LoggingConfig', 'LogLevel',
    'ConfigLoader', 'load_config',
]
