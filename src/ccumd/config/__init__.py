"""
Application configuration: optional config.yaml plus the cache layout.
"""

from ccumd.config.loader import DEFAULT_CONFIG, Config, load_config
from ccumd.config.paths import Paths

__all__ = ["Config", "DEFAULT_CONFIG", "Paths", "load_config"]
