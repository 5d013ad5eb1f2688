"""File comment commands: add a (threaded) comment, change its status."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from studio.deliverable.comment import FileComment
from studio.deliverable.deliverable import Deliverable
from studio.deliverable.permissions import ensure_participant
from studio.domain import studio
from studio.job.job import Job


@studio.command(part_of="FileComment")
class AddFileComment:
    deliverable_id = Identifier(required=True)
    body = Text(required=True)
    parent_comment_id = Identifier()
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier()


@studio.command(part_of="FileComment")
class UpdateFileCommentStatus:
    comment_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier()


@studio.command_handler(part_of=FileComment)
class FileCommentHandler:
    @handle(AddFileComment)
    def add_file_comment(self, command):
        deliverable = current_domain.repository_for(Deliverable).get(command.deliverable_id)
        job = current_domain.repository_for(Job).get(deliverable.job_id)
        ensure_participant(job, command.actor_id, command.actor_role, command.tenant_id)

        repo = current_domain.repository_for(FileComment)
        if command.parent_comment_id:
            parent = repo.get(command.parent_comment_id)
            if str(parent.deliverable_id) != str(deliverable.id):
                raise ValidationError({"parent_comment_id": ["Replies must stay on the same file"]})

        comment = FileComment.add(
            deliverable_id=deliverable.id,
            job_id=deliverable.job_id,
            order_id=deliverable.order_id,
            parent_comment_id=command.parent_comment_id,
            author_id=command.actor_id,
            author_role=command.actor_role,
            body=command.body,
        )
        repo.add(comment)
        return str(comment.id)

    @handle(UpdateFileCommentStatus)
    def update_file_comment_status(self, command):
        repo = current_domain.repository_for(FileComment)
        comment = repo.get(command.comment_id)
        job = current_domain.repository_for(Job).get(comment.job_id)
        ensure_participant(job, command.actor_id, command.actor_role, command.tenant_id)

        comment.change_status(command.status)
        repo.add(comment)


def thread_for(deliverable_id: str) -> list[dict]:
    """Comments on one file, replies nested under their parents, oldest first."""
    repo = current_domain.repository_for(FileComment)
    comments = sorted(
        repo._dao.query.filter(deliverable_id=str(deliverable_id)).all().items,
        key=lambda c: c.created_at,
    )
    nodes = {
        str(c.id): {
            "id": str(c.id),
            "author_id": str(c.author_id),
            "author_role": c.author_role,
            "body": c.body,
            "status": c.status,
            "created_at": c.created_at.isoformat() if c.created_at else None,
            "replies": [],
        }
        for c in comments
    }
    roots = []
    for c in comments:
        node = nodes[str(c.id)]
        parent = nodes.get(str(c.parent_comment_id)) if c.parent_comment_id else None
        if parent is not None:
            parent["replies"].append(node)
        else:
            roots.append(node)
    return roots
