"""Studio FastAPI application.

Web server for the photography and editing workflow. Commands are processed
synchronously via HTTP inside the studio domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied.
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from studio.domain import studio  # noqa: E402

studio.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Studio API",
    description="Photography shoots, editing orders and deliveries",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from studio.api.middleware import install_request_context  # noqa: E402

install_request_context(app, studio)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from studio.api import (  # noqa: E402
    appointment_router,
    delivery_router,
    file_router,
    job_router,
    order_router,
    tenant_router,
)
from studio.api.errors import register_studio_exception_handlers  # noqa: E402

register_studio_exception_handlers(app)

app.include_router(job_router)
app.include_router(appointment_router)
app.include_router(order_router)
app.include_router(file_router)
app.include_router(delivery_router)
app.include_router(tenant_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domains": {"studio": {"name": studio.name}}})
