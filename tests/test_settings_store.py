"""
Tests for the settings document and its JSON store.
"""

import json

import pytest

from ccumd.exceptions import InvalidConfigError
from ccumd.settings import BucketConfig, Settings, SettingsStore
from ccumd.settings.models import validate_endpoint, validate_source_name


class TestSettingsStore:
    """Load/save behaviour of SettingsStore."""

    def test_missing_file_is_created(self, store):
        settings = store.load()
        assert settings.devices == []
        assert settings.buckets == {}
        assert json.loads(store.path.read_text()) == {"devices": [], "s3Buckets": []}

    def test_round_trip(self, store, bucket_config):
        settings = Settings(devices=["laptop", "desktop"], buckets={bucket_config.name: bucket_config})
        store.save(settings)

        loaded = store.load()
        assert loaded.devices == ["laptop", "desktop"]
        assert loaded.buckets == {"r2": bucket_config}

    def test_wire_format_uses_camel_case(self, store, bucket_config):
        store.save(Settings(devices=["laptop"], buckets={"r2": bucket_config}))
        raw = json.loads(store.path.read_text())
        assert raw["devices"] == ["laptop"]
        assert raw["s3Buckets"] == [
            {
                "name": "r2",
                "endpoint": "https://account.r2.cloudflarestorage.com",
                "bucket": "usage-logs",
                "accessKeyId": "AKIATEST",
                "secretAccessKey": "secret123",
            }
        ]

    def test_region_persisted_when_set(self, store):
        config = BucketConfig("minio", "http://localhost:9000", "logs", "k", "s", region="us-east-1")
        store.save(Settings(buckets={"minio": config}))
        raw = json.loads(store.path.read_text())
        assert raw["s3Buckets"][0]["region"] == "us-east-1"
        assert store.load().buckets["minio"].region == "us-east-1"

    def test_corrupt_file_resets_to_empty(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json")

        settings = store.load()
        assert settings.devices == []
        assert settings.buckets == {}
        # The corrupt document has been replaced by a valid one
        assert json.loads(store.path.read_text()) == {"devices": [], "s3Buckets": []}

    def test_add_after_corruption_persists(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("\x00\x01garbage")

        settings = store.load()
        settings.devices.append("laptop")
        store.save(settings)
        assert store.load().devices == ["laptop"]

    def test_non_object_document_resets(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("[1, 2, 3]")
        assert store.load().devices == []

    def test_invalid_entries_are_skipped(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(
            json.dumps(
                {
                    "devices": ["laptop", "", "../..", 42, "laptop"],
                    "s3Buckets": [
                        {"name": "broken"},
                        "not-an-object",
                        {
                            "name": "r2",
                            "endpoint": "https://e.example.com",
                            "bucket": "b",
                            "accessKeyId": "k",
                            "secretAccessKey": "s",
                        },
                    ],
                }
            )
        )
        settings = store.load()
        assert settings.devices == ["laptop"]
        assert list(settings.buckets) == ["r2"]

    def test_missing_keys_default_to_empty(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{}")
        settings = store.load()
        assert settings.devices == []
        assert settings.buckets == {}

    def test_save_leaves_no_temp_files(self, store, bucket_config):
        store.save(Settings(devices=["laptop"], buckets={"r2": bucket_config}))
        store.save(Settings(devices=["desktop"]))
        assert sorted(p.name for p in store.path.parent.iterdir()) == ["settings.json"]


class TestBucketConfig:
    """Validation and serialization of BucketConfig."""

    def test_valid(self, bucket_config):
        bucket_config.validate()

    @pytest.mark.parametrize("field", ["name", "endpoint", "bucket", "access_key_id", "secret_access_key"])
    def test_required_fields(self, bucket_config, field):
        values = {
            "name": bucket_config.name,
            "endpoint": bucket_config.endpoint,
            "bucket": bucket_config.bucket,
            "access_key_id": bucket_config.access_key_id,
            "secret_access_key": bucket_config.secret_access_key,
        }
        values[field] = ""
        with pytest.raises(InvalidConfigError):
            BucketConfig(**values).validate()

    def test_empty_region_rejected(self, bucket_config):
        config = BucketConfig(
            bucket_config.name, bucket_config.endpoint, bucket_config.bucket, "k", "s", region="  "
        )
        with pytest.raises(InvalidConfigError, match="region"):
            config.validate()

    def test_repr_hides_credentials(self, bucket_config):
        text = repr(bucket_config)
        assert "secret123" not in text
        assert "AKIATEST" not in text
        assert "usage-logs" in text

    def test_from_dict_requires_fields(self):
        with pytest.raises(InvalidConfigError, match="accessKeyId"):
            BucketConfig.from_dict(
                {"name": "r2", "endpoint": "https://e", "bucket": "b", "secretAccessKey": "s"}
            )


class TestValidators:
    """Name and endpoint validation."""

    @pytest.mark.parametrize("name", ["laptop", "user@host", "build-box.lan", "dev_01"])
    def test_valid_names(self, name):
        assert validate_source_name(name) == name

    @pytest.mark.parametrize("name", ["", "   ", " laptop", ".", "..", "a/b", "a\\b", "a\x00b"])
    def test_invalid_names(self, name):
        with pytest.raises(InvalidConfigError):
            validate_source_name(name)

    @pytest.mark.parametrize("endpoint", ["https://s3.example.com", "http://localhost:9000"])
    def test_valid_endpoints(self, endpoint):
        validate_endpoint(endpoint)

    @pytest.mark.parametrize("endpoint", ["s3.example.com", "ftp://host", "https://", "not a url"])
    def test_invalid_endpoints(self, endpoint):
        with pytest.raises(InvalidConfigError, match="endpoint"):
            validate_endpoint(endpoint)
