"""Configuration package."""

from .loader import create_test_config, load_config
from .settings import Settings

__all__ = ["Settings", "create_test_config", "load_config"]
