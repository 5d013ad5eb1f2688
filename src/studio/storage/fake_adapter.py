"""Fake object storage: keeps blobs in a dict for tests and local runs."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from studio.storage.port import ObjectStoragePort, SignedUrl, StorageResult


class FakeObjectStorage(ObjectStoragePort):
    """In-memory object store. Writes and deletes succeed unless configured otherwise."""

    def __init__(self):
        self.blobs: dict[str, bytes] = {}
        self.content_types: dict[str, str | None] = {}
        self.deleted: list[str] = []
        self.should_succeed = True
        self.failure_reason = "Object storage unavailable"
        self.failing_deletes: set[str] = set()

    def configure(self, should_succeed: bool = True, failure_reason: str = "Object storage unavailable"):
        """Make every write and delete fail (or succeed again)."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def fail_delete_of(self, path: str) -> None:
        """Make deleting one specific path fail."""
        self.failing_deletes.add(path)

    def write(self, path: str, data: bytes, content_type: str | None = None) -> StorageResult:
        if not self.should_succeed:
            return StorageResult(success=False, path=path, failure_reason=self.failure_reason)
        self.blobs[path] = data
        self.content_types[path] = content_type
        return StorageResult(success=True, path=path)

    def exists(self, path: str) -> bool:
        return path in self.blobs

    def signed_url(self, path: str, expires_in_hours: int) -> SignedUrl:
        expires_at = datetime.now(UTC) + timedelta(hours=expires_in_hours)
        signature = uuid4().hex[:16]
        return SignedUrl(
            url=f"https://fake-storage.example.com/{path}?sig={signature}",
            expires_at=expires_at,
        )

    def delete(self, path: str) -> StorageResult:
        if not self.should_succeed or path in self.failing_deletes:
            return StorageResult(success=False, path=path, failure_reason=self.failure_reason)
        self.blobs.pop(path, None)
        self.content_types.pop(path, None)
        self.deleted.append(path)
        return StorageResult(success=True, path=path)

    def paths_under(self, prefix: str) -> list[str]:
        return sorted(p for p in self.blobs if p.startswith(prefix))

    def reset(self):
        self.blobs.clear()
        self.content_types.clear()
        self.deleted.clear()
        self.failing_deletes.clear()
        self.should_succeed = True
        self.failure_reason = "Object storage unavailable"
