"""Query helpers for folders and deliverables.

Folder paths nest by prefix, so subtree lookups load the job's rows and
filter them here rather than relying on provider-specific lookups.
"""

from protean.exceptions import ObjectNotFoundError

from studio.deliverable.deliverable import Deliverable, DeliverableStatus
from studio.deliverable.folder import Folder
from studio.deliverable.paths import is_within
from studio.domain import studio


@studio.repository(part_of=Folder)
class FolderRepository:
    def for_job(self, job_id: str) -> list[Folder]:
        folders = self._dao.query.filter(job_id=str(job_id)).all().items
        return sorted(folders, key=lambda f: (f.display_order or 0, f.folder_path))

    def get_by_path(self, job_id: str, folder_path: str) -> Folder:
        folder = self._dao.query.filter(job_id=str(job_id), folder_path=folder_path).all().first
        if folder is None:
            raise ObjectNotFoundError(f"Folder `{folder_path}` does not exist in job {job_id}")
        return folder

    def subtree(self, job_id: str, folder_path: str) -> list[Folder]:
        """The folder at ``folder_path`` and everything nested below it."""
        return [f for f in self.for_job(job_id) if is_within(f.folder_path, folder_path)]

    def siblings(self, job_id: str, parent_path: str | None) -> list[Folder]:
        return [f for f in self.for_job(job_id) if (f.parent_path or None) == (parent_path or None)]


@studio.repository(part_of=Deliverable)
class DeliverableRepository:
    def for_job(self, job_id: str) -> list[Deliverable]:
        return self._dao.query.filter(job_id=str(job_id)).all().items

    def for_order(self, order_id: str) -> list[Deliverable]:
        return self._dao.query.filter(order_id=str(order_id)).all().items

    def completed_for_order(self, order_id: str) -> list[Deliverable]:
        return [d for d in self.for_order(order_id) if d.status == DeliverableStatus.COMPLETED.value]

    def in_subtree(self, job_id: str, folder_path: str) -> list[Deliverable]:
        return [d for d in self.for_job(job_id) if is_within(d.folder_path, folder_path)]

    def completed_named(
        self,
        job_id: str,
        folder_path: str | None,
        original_name: str,
        order_id: str | None = None,
    ) -> list[Deliverable]:
        """Completed files in one folder sharing an original name.

        Loose files (no folder) are scoped to ``order_id`` as well, so two
        orders on the same job never replace each other's work.
        """
        return [
            d
            for d in self.for_job(job_id)
            if (d.folder_path or None) == (folder_path or None)
            and (bool(folder_path) or str(d.order_id or "") == str(order_id or ""))
            and d.original_name == original_name
            and d.status == DeliverableStatus.COMPLETED.value
        ]
