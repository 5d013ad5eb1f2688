"""Query helpers for the Order aggregate."""

from studio.domain import studio
from studio.order.order import Order


@studio.repository(part_of=Order)
class OrderRepository:
    def find_by_number(self, tenant_id: str, order_number: str) -> Order | None:
        return self._dao.query.filter(tenant_id=str(tenant_id), order_number=order_number).all().first

    def for_job(self, job_id: str) -> list[Order]:
        return self._dao.query.filter(job_id=str(job_id)).all().items

    def for_editor(self, editor_id: str) -> list[Order]:
        return self._dao.query.filter(assigned_editor_id=str(editor_id)).all().items
