# neurosignals/config/__init__.py

"""
Configuration management for neurosignals.

This package handles loading configuration from files (TOML),
environment variables, and internal defaults, providing a unified
configuration object.
"""

from .models import NeurosignalsConfig
from .loaders import load_configuration, get_active_config, set_active_config

__all__ = [
    "NeurosignalsConfig",
    "load_configuration",
    "get_active_config",
    "set_active_config",
]
