"""FileComment aggregate: threaded review notes on a single deliverable.

State Machine:
    PENDING → IN_PROGRESS → RESOLVED
    PENDING → RESOLVED
    RESOLVED → PENDING (reopened)
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text

from studio.deliverable.events import FileCommentAdded, FileCommentStatusChanged
from studio.domain import studio
from studio.errors import InvalidStateTransition


class CommentStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


_VALID_TRANSITIONS = {
    CommentStatus.PENDING: {CommentStatus.IN_PROGRESS, CommentStatus.RESOLVED},
    CommentStatus.IN_PROGRESS: {CommentStatus.RESOLVED, CommentStatus.PENDING},
    CommentStatus.RESOLVED: {CommentStatus.PENDING},
}


@studio.aggregate
class FileComment:
    deliverable_id = Identifier(required=True)
    job_id = Identifier(required=True)
    order_id = Identifier()
    parent_comment_id = Identifier()
    author_id = Identifier(required=True)
    author_role = String(required=True, max_length=20)
    body = Text(required=True)
    status = String(max_length=20, choices=CommentStatus, default=CommentStatus.PENDING.value)
    resolved_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def add(
        cls,
        deliverable_id: str,
        job_id: str,
        author_id: str,
        author_role: str,
        body: str,
        order_id: str | None = None,
        parent_comment_id: str | None = None,
    ):
        if body is None or not body.strip():
            raise ValidationError({"body": ["Comment cannot be empty"]})
        now = datetime.now(UTC)
        comment = cls(
            deliverable_id=deliverable_id,
            job_id=job_id,
            order_id=order_id,
            parent_comment_id=parent_comment_id,
            author_id=author_id,
            author_role=author_role,
            body=body.strip(),
            status=CommentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        comment.raise_(
            FileCommentAdded(
                comment_id=str(comment.id),
                deliverable_id=str(deliverable_id),
                parent_comment_id=str(parent_comment_id) if parent_comment_id else None,
                author_id=str(author_id),
                created_at=now,
            )
        )
        return comment

    def change_status(self, status: str) -> None:
        current = CommentStatus(self.status)
        try:
            target = CommentStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown comment status: {status}"]}) from None
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidStateTransition("comment", current.value, target.value, comment_id=str(self.id))

        now = datetime.now(UTC)
        self.status = target.value
        self.resolved_at = now if target == CommentStatus.RESOLVED else None
        self.updated_at = now
        self.raise_(FileCommentStatusChanged(comment_id=str(self.id), status=target.value, changed_at=now))
