"""
Settings document types.

``Settings`` is the in-memory form of settings.json. The on-disk format uses
camelCase keys (``s3Buckets``, ``accessKeyId``...), so conversion lives here
rather than leaking into the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

from ccumd.exceptions import InvalidConfigError

# (attribute, JSON key) pairs for the required bucket fields
_BUCKET_FIELDS = (
    ("name", "name"),
    ("endpoint", "endpoint"),
    ("bucket", "bucket"),
    ("access_key_id", "accessKeyId"),
    ("secret_access_key", "secretAccessKey"),
)


def validate_source_name(value: str, *, kind: str = "Device") -> str:
    """
    Check that a device id or bucket name can be used as one directory name.

    Returns the value unchanged so callers can validate inline.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidConfigError(f"{kind} name is required", field="name")
    if value != value.strip():
        raise InvalidConfigError(f"{kind} name '{value}' has leading or trailing whitespace", field="name")
    if value in (".", "..") or "/" in value or "\\" in value or "\x00" in value:
        raise InvalidConfigError(f"{kind} name '{value}' cannot be used as a directory name", field="name")
    return value


def validate_endpoint(endpoint: str) -> None:
    """Require an absolute http(s) URL with a host."""
    try:
        parsed = urlparse(endpoint)
    except ValueError as e:
        raise InvalidConfigError(f"Invalid endpoint URL '{endpoint}': {e}", field="endpoint") from e
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidConfigError(f"Invalid endpoint URL '{endpoint}'", field="endpoint")


@dataclass(frozen=True)
class BucketConfig:
    """
    Connection details for one S3-compatible bucket source.

    ``name`` is the local identifier (unique across buckets, used as the cache
    directory name); ``bucket`` is the bucket id on the remote service.
    """

    name: str
    endpoint: str
    bucket: str
    access_key_id: str
    secret_access_key: str
    region: str | None = None

    def validate(self) -> None:
        """
        Validate before persistence.

        Raises:
            InvalidConfigError: On a missing field, bad name or malformed endpoint
        """
        for attr, key in _BUCKET_FIELDS:
            value = getattr(self, attr)
            if not isinstance(value, str) or not value.strip():
                raise InvalidConfigError(f"Bucket field '{key}' is required", field=key)
        validate_source_name(self.name, kind="Bucket")
        validate_endpoint(self.endpoint)
        if self.region is not None and (not isinstance(self.region, str) or not self.region.strip()):
            raise InvalidConfigError("Bucket region must be a non-empty string when set", field="region")

    def to_dict(self) -> dict[str, Any]:
        data = {key: getattr(self, attr) for attr, key in _BUCKET_FIELDS}
        if self.region:
            data["region"] = self.region
        return data

    @classmethod
    def from_dict(cls, data: Any) -> BucketConfig:
        """
        Build from a settings.json entry.

        Only checks presence and type; endpoint validation is done at creation
        time by the registry, not on every load.
        """
        if not isinstance(data, dict):
            raise InvalidConfigError(f"Bucket entry must be an object, got {type(data).__name__}")
        values: dict[str, Any] = {}
        for attr, key in _BUCKET_FIELDS:
            value = data.get(key)
            if not isinstance(value, str) or not value:
                raise InvalidConfigError(f"Bucket entry is missing '{key}'", field=key)
            values[attr] = value
        validate_source_name(values["name"], kind="Bucket")
        region = data.get("region")
        values["region"] = region if isinstance(region, str) and region else None
        return cls(**values)

    def __repr__(self) -> str:
        # Keep credentials out of logs and tracebacks
        return f"BucketConfig(name={self.name!r}, endpoint={self.endpoint!r}, bucket={self.bucket!r}, region={self.region!r})"


@dataclass
class Settings:
    """Registered sources. Devices keep registration order; buckets keep insertion order."""

    devices: list[str] = field(default_factory=list)
    buckets: dict[str, BucketConfig] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "devices": list(self.devices),
            "s3Buckets": [bucket.to_dict() for bucket in self.buckets.values()],
        }
