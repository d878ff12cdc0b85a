"""FastAPI application entry point."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from attachment_hub.api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from attachment_hub.api.routes import attachments, metrics
from attachment_hub.core.config import get_settings
from attachment_hub.core.structured_logging import configure_logging

settings = get_settings()
configure_logging()

docs_enabled = settings.api_docs_enabled
if docs_enabled is None:
    docs_enabled = settings.environment != "production"

app = FastAPI(
    title="Attachment Hub API",
    description="Attachment metadata, ownership and guarded downloads",
    version="1.0.0",
    docs_url="/api/docs" if docs_enabled else None,
    redoc_url="/api/redoc" if docs_enabled else None,
    openapi_url="/api/openapi.json" if docs_enabled else None,
)

# Middleware is applied in reverse order: request logging ends up outermost
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)
app.add_middleware(RequestLoggingMiddleware)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


app.include_router(attachments.router, prefix="/api/attachments", tags=["attachments"])
app.include_router(metrics.router, prefix="/api", tags=["metrics"])
