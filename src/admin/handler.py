"""
Admin Lambda entry point.

Local dev:
    PYTHONPATH=src ENV=local uv run uvicorn admin.handler:app --reload --port 8001

Lambda handler:
    admin.handler.handler
"""

from fastapi import FastAPI
from mangum import Mangum

from admin.routes import dashboard, events, users
from portal.errors import register_exception_handlers
from portal.logging import configure_logging

configure_logging()

app = FastAPI(
    title="Events Admin API",
    description="Event and member administration. All /api/admin routes require an admin or superadmin JWT.",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

register_exception_handlers(app)

app.include_router(events.router)
app.include_router(users.router)
app.include_router(dashboard.router)


@app.get("/health", include_in_schema=False)
def health():
    return {"status": "ok"}


# Mangum adapts the FastAPI ASGI app for AWS Lambda + API Gateway (HTTP API).
handler = Mangum(app, lifespan="off")
