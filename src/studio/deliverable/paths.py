"""Object storage layout for deliverables.

Completed work lives under ``completed/{job_id}/folders/{folder_token}/...``
(nested folders append their own token). Folder names are metadata only, so
renaming a folder never moves bytes. Client inputs for editing live under
``orders/{job_id}/...``.
"""

import re
from datetime import datetime
from pathlib import PurePosixPath
from uuid import uuid4

COMPLETED_ROOT = "completed"
INPUTS_ROOT = "orders"
FOLDERS_SEGMENT = "folders"
LOOSE_FILES_SEGMENT = "files"
PLACEHOLDER_NAME = ".keep"

_WHITESPACE = re.compile(r"\s+")


def new_folder_token() -> str:
    return uuid4().hex[:16]


def child_folder_path(parent_path: str | None, token: str) -> str:
    if parent_path:
        return f"{parent_path}/{token}"
    return f"{FOLDERS_SEGMENT}/{token}"


def is_within(folder_path: str | None, ancestor_path: str) -> bool:
    """True if ``folder_path`` is ``ancestor_path`` or nested below it."""
    if not folder_path:
        return False
    return folder_path == ancestor_path or folder_path.startswith(ancestor_path + "/")


def safe_file_name(name: str) -> str:
    base = PurePosixPath(name.replace("\\", "/")).name
    return _WHITESPACE.sub("_", base.strip())


def stored_file_name(original_name: str, now: datetime) -> str:
    return f"{int(now.timestamp() * 1000)}_{safe_file_name(original_name)}"


def completed_prefix(job_id: str, folder_path: str | None) -> str:
    return f"{COMPLETED_ROOT}/{job_id}/{folder_path or LOOSE_FILES_SEGMENT}"


def completed_object_path(job_id: str, folder_path: str | None, stored_name: str) -> str:
    return f"{completed_prefix(job_id, folder_path)}/{stored_name}"


def input_object_path(job_id: str, folder_path: str | None, stored_name: str) -> str:
    return f"{INPUTS_ROOT}/{job_id}/{folder_path or LOOSE_FILES_SEGMENT}/{stored_name}"


def placeholder_path(job_id: str, folder_path: str) -> str:
    return f"{completed_prefix(job_id, folder_path)}/{PLACEHOLDER_NAME}"
