from studio.api.routes import (
    appointment_router,
    delivery_router,
    file_router,
    job_router,
    order_router,
    tenant_router,
)

__all__ = [
    "appointment_router",
    "delivery_router",
    "file_router",
    "job_router",
    "order_router",
    "tenant_router",
]
