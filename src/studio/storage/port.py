"""Object storage port.

Deliverable bytes live in an object store addressed by path. The workflow
only needs four primitives: write, exists, time-limited signed URLs and
delete. Paths for completed work follow
``completed/{job_id}/folders/{folder_token}/{relative_path}`` so folder
renames never move bytes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StorageResult:
    """Outcome of a write or delete."""

    success: bool
    path: str
    failure_reason: str | None = None


@dataclass(frozen=True)
class SignedUrl:
    url: str
    expires_at: datetime


class ObjectStoragePort(ABC):
    """Abstract interface for object storage adapters."""

    @abstractmethod
    def write(self, path: str, data: bytes, content_type: str | None = None) -> StorageResult:
        """Store ``data`` at ``path``, replacing anything already there."""
        ...

    @abstractmethod
    def exists(self, path: str) -> bool: ...

    @abstractmethod
    def signed_url(self, path: str, expires_in_hours: int) -> SignedUrl:
        """Return a read URL for ``path`` valid for ``expires_in_hours``."""
        ...

    @abstractmethod
    def delete(self, path: str) -> StorageResult: ...
