"""
Settings store: the persisted registry of devices and buckets.
"""

from ccumd.settings.models import BucketConfig, Settings, validate_endpoint, validate_source_name
from ccumd.settings.store import SettingsStore

__all__ = [
    "BucketConfig",
    "Settings",
    "SettingsStore",
    "validate_endpoint",
    "validate_source_name",
]
