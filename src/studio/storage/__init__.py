"""Object storage adapter registry.

Uses FakeObjectStorage by default. Other backends are selected with the
STORAGE_ADAPTER environment variable.
"""

import os

from studio.storage.port import ObjectStoragePort

_storage_instance: ObjectStoragePort | None = None


def get_storage() -> ObjectStoragePort:
    """Return the configured object storage adapter (singleton)."""
    global _storage_instance
    if _storage_instance is None:
        adapter = os.environ.get("STORAGE_ADAPTER", "fake")
        if adapter == "fake":
            from studio.storage.fake_adapter import FakeObjectStorage

            _storage_instance = FakeObjectStorage()
        else:
            raise ValueError(f"Unknown storage adapter: {adapter}")
    return _storage_instance


def set_storage(storage: ObjectStoragePort) -> None:
    """Override the active storage adapter (useful for tests)."""
    global _storage_instance
    _storage_instance = storage


def reset_storage() -> None:
    global _storage_instance
    _storage_instance = None


def signed_url_ttl_hours() -> int:
    return int(os.environ.get("SIGNED_URL_TTL_HOURS", "168"))
