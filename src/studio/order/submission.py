"""SubmitForReview: the editor hands finished work to the QC gate."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from studio.deliverable.deliverable import Deliverable
from studio.domain import studio
from studio.order.order import Order


@studio.command(part_of="Order")
class SubmitForReview:
    order_id = Identifier(required=True)
    editor_id = Identifier(required=True)


@studio.command_handler(part_of=Order)
class SubmissionHandler:
    @handle(SubmitForReview)
    def submit_for_review(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        completed = current_domain.repository_for(Deliverable).completed_for_order(order.id)
        if not completed:
            raise ValidationError({"deliverables": ["Upload at least one completed file before submitting"]})

        order.submit_for_review(command.editor_id, files=len(completed))
        repo.add(order)
