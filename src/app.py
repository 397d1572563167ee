"""Nepify FastAPI application.

Marketplace backend: identity, catalogue, ordering and payments routers
mounted on one app. Collaborators (settings, database, payment gateway,
token verifier) live on ``app.state`` so tests can inject their own.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalogue.api import product_router, vendor_catalogue_router
from identity.api import router as identity_router
from identity.auth import TokenVerifier
from ordering.api import address_router, cart_router, order_router, vendor_order_router
from payments.api import checkout_router, webhook_router
from payments.gateway import PaymentGateway, build_gateway
from shared.api import register_exception_handlers
from shared.config import Settings
from shared.database import Database
from shared.utils.logging import bind_request, clear_context, configure_logging, get_logger

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    gateway: PaymentGateway | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    settings.validate()

    app = FastAPI(
        title="Nepify API",
        description="Multi-vendor marketplace: catalogue, cart, checkout and order lifecycle",
    )
    app.state.settings = settings
    app.state.database = database or Database(settings.database_url)
    app.state.gateway = gateway or build_gateway(settings)
    app.state.token_verifier = TokenVerifier(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Bind a request id to every log line emitted while serving the request."""
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        bind_request(request_id, request.method, request.url.path)
        try:
            response = await call_next(request)
        finally:
            clear_context()
        response.headers["X-Request-ID"] = request_id
        return response

    register_exception_handlers(app, settings)

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    app.include_router(identity_router)
    app.include_router(product_router)
    app.include_router(vendor_catalogue_router)
    app.include_router(cart_router)
    app.include_router(address_router)
    app.include_router(order_router)
    app.include_router(vendor_order_router)
    app.include_router(checkout_router)
    app.include_router(webhook_router)

    # -----------------------------------------------------------------------
    # Health
    # -----------------------------------------------------------------------
    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "environment": settings.environment,
                "payment_gateway": type(app.state.gateway).__name__,
            }
        )

    logger.info(
        "Application configured",
        environment=settings.environment,
        payment_gateway=settings.payment_gateway,
    )
    return app


def _create_default_app() -> FastAPI:
    settings = Settings.from_env()
    configure_logging(settings)
    return create_app(settings)


app = _create_default_app()
