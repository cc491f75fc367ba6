# ruff: noqa: E402
# E402 disabled: load_dotenv() must run before other imports for Sentry DSN

import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from core.correlation import generate_correlation_id, get_correlation_id
from core.logging_config import configure_logging
from core.middleware import RequestContextMiddleware
from core.sentry_config import init_sentry
from helpers.rate_limiter import limiter
from helpers.security_headers import SecurityHeadersMiddleware
from models.config import settings
from models.exceptions import (
    AlreadyExistsException,
    AuthenticationException,
    BusinessRuleException,
    DomainException,
    NotFoundException,
    PermissionDeniedException,
    ValidationException,
)
from repositories.database import Base, engine
from routers import communities_router, community_reports_router, reports_router

# Sentry must be up before the app object exists
init_sentry()
configure_logging(os.getenv("ENVIRONMENT", "development"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup when AUTO_CREATE_DB is set, else leave it to Alembic."""
    if settings.AUTO_CREATE_DB:
        logger.info("AUTO_CREATE_DB enabled; running create_all()")
        Base.metadata.create_all(bind=engine)

    logger.info(f"{settings.PROJECT_NAME} API started ({settings.ENVIRONMENT})")
    yield
    logger.info(f"{settings.PROJECT_NAME} API stopped")


app = FastAPI(title=f"{settings.PROJECT_NAME} API", lifespan=lifespan)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]

# Last added runs first: CORS, then request context, then security headers
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestContextMiddleware)

is_development = settings.ENVIRONMENT == "development"
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if is_development else settings.CORS_ORIGINS,
    allow_credentials=not is_development,
    allow_methods=["*"],
    allow_headers=["*"],
)


# (exception class, HTTP status, log label, extra headers)
DOMAIN_ERROR_STATUS: list[tuple[type[DomainException], int, str, dict | None]] = [
    (NotFoundException, status.HTTP_404_NOT_FOUND, "Not found", None),
    (AlreadyExistsException, status.HTTP_409_CONFLICT, "Already exists", None),
    (ValidationException, status.HTTP_400_BAD_REQUEST, "Validation error", None),
    (PermissionDeniedException, status.HTTP_403_FORBIDDEN, "Permission denied", None),
    (
        AuthenticationException,
        status.HTTP_401_UNAUTHORIZED,
        "Authentication failed",
        {"WWW-Authenticate": "Bearer"},
    ),
    (BusinessRuleException, status.HTTP_400_BAD_REQUEST, "Business rule violation", None),
]


def _domain_error_handler(status_code: int, label: str, headers: dict | None = None):
    """Build a handler turning a domain exception into ``{detail, correlation_id}``."""

    async def handler(request: Request, exc: DomainException) -> JSONResponse:
        sentry_sdk.set_tag("correlation_id", exc.correlation_id)
        sentry_sdk.set_tag("exception_type", type(exc).__name__)
        logger.warning(
            f"{label}: {exc.message}",
            correlation_id=exc.correlation_id,
            exception_type=type(exc).__name__,
            path=request.url.path,
        )
        if type(exc) is DomainException:
            # Not mapped to a specific category, worth a look
            sentry_sdk.capture_exception(exc)

        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "correlation_id": exc.correlation_id},
            headers=headers,
        )

    return handler


for exc_class, status_code, label, headers in DOMAIN_ERROR_STATUS:
    app.add_exception_handler(exc_class, _domain_error_handler(status_code, label, headers))

# Subclasses not listed above fall back to 400
app.add_exception_handler(
    DomainException,
    _domain_error_handler(status.HTTP_400_BAD_REQUEST, "Domain exception"),
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log and report anything unexpected, answer with a generic 500."""
    correlation_id = get_correlation_id() or generate_correlation_id()
    sentry_sdk.set_tag("correlation_id", correlation_id)
    sentry_sdk.capture_exception(exc)

    # repr() keeps curly braces from being read as loguru placeholders
    logger.exception(
        f"Unhandled exception: {exc!r}",
        correlation_id=correlation_id,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "correlation_id": correlation_id},
    )


for module in (communities_router, community_reports_router, reports_router):
    app.include_router(module.router, prefix="/api")


@app.get("/")
def root() -> dict:
    return {
        "message": f"Welcome to {settings.PROJECT_NAME} API",
        "version": settings.VERSION,
    }


@app.get("/api/health")
def health_check() -> dict:
    """Liveness probe for the load balancer."""
    return {"status": "healthy"}
