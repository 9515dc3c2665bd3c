import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware

from app.api.routes_client import router as client_router
from app.api.routes_entitlements import router as entitlements_router
from app.api.routes_health import router as health_router
from app.api.routes_invoice import router as invoice_router
from app.api.routes_metrics import router as metrics_router
from app.api.routes_template import router as template_router
from app.api.routes_webhooks import router as webhook_router
from app.core.config import settings
from app.core.errors import register_error_handlers
from app.core.logger import init_logging
from app.core.monitoring import init_monitoring
from app.db import session as db_session
from app.db.base_class import Base
from app.models import models  # noqa: F401  registers tables on Base.metadata
from app.services.plan_access import PlanAccessService, PlanCatalog, build_default_catalog

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):  # type: ignore[override]
        response = await call_next(request)
        response.headers.setdefault("Referrer-Policy", "same-origin")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.ENV.lower() == "dev":
        # Production schemas are managed outside the app
        Base.metadata.create_all(bind=db_session.engine)
        logger.info("Dev schema ensured at %s", settings.DATABASE_URL)
    yield


def create_app(catalog: PlanCatalog | None = None) -> FastAPI:
    """Build the API.

    Args:
        catalog: Plan catalog the entitlement checks run against; defaults to
            the published free/pro catalog
    """
    init_logging()
    init_monitoring()

    is_production = settings.ENV.lower() == "prod"
    app = FastAPI(
        title=settings.APP_NAME,
        debug=False,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
        lifespan=lifespan,
    )
    app.state.plan_access = PlanAccessService(catalog or build_default_catalog())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    register_error_handlers(app)

    app.include_router(webhook_router, prefix="/webhooks", tags=["webhooks"])
    app.include_router(invoice_router, prefix="/invoices", tags=["invoices"])
    app.include_router(client_router, prefix="/clients", tags=["clients"])
    app.include_router(template_router, prefix="/templates", tags=["templates"])
    app.include_router(entitlements_router, tags=["entitlements"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(health_router)

    return app


app = create_app()
