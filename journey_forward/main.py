"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from journey_forward.api.v1.admin_auth import router as admin_auth_router
from journey_forward.api.v1.admin_requests import router as admin_requests_router
from journey_forward.api.v1.admin_users import router as admin_users_router
from journey_forward.api.v1.bookings import router as bookings_router
from journey_forward.api.v1.discounts import router as discounts_router
from journey_forward.api.v1.payments import router as payments_router
from journey_forward.api.v1.public import legacy_router
from journey_forward.api.v1.public import router as public_router
from journey_forward.api.v1.uploads import router as uploads_router
from journey_forward.config import settings
from journey_forward.database import create_engine, create_session_factory
from journey_forward.errors import ServiceError
from journey_forward.notifications.email import EmailNotifier
from journey_forward.payments.gateway import PaymentGateway
from journey_forward.uploads.storage import ImageStorage

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.dev.ConsoleRenderer() if settings.environment == "development"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, settings.log_level.upper(), logging.INFO)
    ),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build shared clients on startup, dispose of them on shutdown."""
    engine = create_engine(settings.database_url)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.notifier = EmailNotifier(
        api_key=settings.resend_api_key,
        from_email=settings.from_email,
        admin_email=settings.admin_email,
        public_base_url=settings.public_base_url,
        admin_dashboard_url=settings.admin_dashboard_url,
    )
    app.state.payment_gateway = PaymentGateway(
        api_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
    )
    app.state.image_storage = ImageStorage(
        bucket_name=settings.s3_bucket_name,
        region=settings.aws_region,
        base_url=settings.s3_base_url,
    )

    logger.info(
        "app_starting",
        environment=settings.environment,
        email_enabled=app.state.notifier.enabled,
        payments_enabled=bool(settings.stripe_secret_key),
    )
    yield
    await engine.dispose()
    logger.info("app_shutting_down")


app = FastAPI(
    title="Journey Forward Services API",
    description="Booking, quotation and payment backend for junk removal and moving",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("service_error", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    logger.info("request_validation_failed", path=request.url.path, error=message)
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


# Include routers
app.include_router(public_router)
app.include_router(legacy_router)
app.include_router(bookings_router)
app.include_router(payments_router)
app.include_router(uploads_router)
app.include_router(admin_auth_router)
app.include_router(admin_requests_router)
app.include_router(discounts_router)
app.include_router(admin_users_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Journey Forward Services API",
        "version": "0.1.0",
        "status": "running",
    }
