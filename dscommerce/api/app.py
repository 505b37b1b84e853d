"""FastAPI application for the DSCommerce API."""

import uuid
from contextlib import asynccontextmanager
from typing import Any, List

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from dscommerce import __version__
from dscommerce.api.routes import auth, categories, orders, products, users
from dscommerce.api.shared.helpers.errors import (
    CommerceError,
    ErrorCode,
    FieldMessage,
    create_error_body,
    error_body_for,
)
from dscommerce.config import get_config, validate_config
from dscommerce.db.session import check_db, close_db, get_engine
from dscommerce.logging_config import (
    clear_context,
    configure_logging,
    get_logger,
    set_context,
)

logger = get_logger(__name__)

HEALTH_PATHS = ("/health", "/health/ready", "GET /health", "GET /health/ready")


def _init_sentry() -> None:
    """Initialize Sentry SDK with FastAPI integrations."""
    config = get_config()
    if not config.sentry.dsn:
        logger.info("sentry_disabled")
        return

    sentry_sdk.init(
        dsn=config.sentry.dsn,
        environment=config.api.environment,
        release=__version__,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        send_default_pii=False,
        traces_sampler=_traces_sampler,
    )
    logger.info("sentry_initialized", environment=config.api.environment)


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """Skip tracing for health checks."""
    transaction_name = sampling_context.get("transaction_context", {}).get("name", "")
    if transaction_name in HEALTH_PATHS:
        return 0.0
    return get_config().sentry.traces_sample_rate


_init_sentry()


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Tag every request with a correlation id for logs and error reports."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())

        set_context(correlation_id=correlation_id)
        sentry_sdk.set_tag("correlation_id", correlation_id)

        try:
            response = await call_next(request)
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    config = get_config()
    configure_logging(
        level=config.logging.level,
        format=config.logging.format,
        file=config.logging.file,
    )
    for warning in validate_config(config):
        logger.warning("config_warning", detail=warning)

    logger.info("api_starting", version=__version__, environment=config.api.environment)
    yield
    await close_db()
    logger.info("api_stopped")


OPENAPI_TAGS = [
    {
        "name": "auth",
        "description": "OAuth2 password grant. Exchange user credentials for a bearer token.",
    },
    {
        "name": "orders",
        "description": "Place orders and read them back. Clients see their own orders, "
        "admins see every order.",
    },
    {
        "name": "products",
        "description": "Product catalog. Public search and lookup; admin-only maintenance.",
    },
    {
        "name": "categories",
        "description": "Product categories.",
    },
    {
        "name": "users",
        "description": "The authenticated user's profile.",
    },
    {
        "name": "health",
        "description": "Liveness and readiness probes for load balancers and orchestrators.",
    },
]

app = FastAPI(
    title="DSCommerce API",
    description="""
# DSCommerce API

Order and catalog backend for an online shop.

## Authentication

Obtain a token with the OAuth2 password grant, authenticating the client with
HTTP Basic:

```
POST /oauth2/token
Authorization: Basic <base64(client_id:client_secret)>

grant_type=password&username=<email>&password=<password>
```

Then send it on every protected request:

```
Authorization: Bearer <access_token>
```

## Error Responses

All errors follow this format:

```json
{
  "timestamp": "2024-05-01T12:00:00Z",
  "status": 404,
  "error": "Not Found",
  "message": "Order 100 not found",
  "path": "/orders/100",
  "code": "ERR_RES_001"
}
```

Validation failures (422) also carry `errors: [{fieldName, message}]`.
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=OPENAPI_TAGS,
    lifespan=lifespan,
)

# Correlation ID middleware first (before CORS)
app.add_middleware(CorrelationIdMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(orders.router)
app.include_router(products.router)
app.include_router(categories.router)
app.include_router(users.router)


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/health/ready", tags=["health"])
async def readiness_check():
    """Readiness check verifying the database is reachable.

    Returns 200 when the database answers, 503 otherwise.
    """
    checks: dict[str, Any] = {}
    try:
        await check_db(get_engine())
        checks["database"] = True
    except Exception as e:
        checks["database"] = False
        checks["database_error"] = str(e)
        logger.warning("readiness_database_failed", error=str(e))

    healthy = checks["database"] is True
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if healthy else "not_ready", "checks": checks},
    )


# ============================================================================
# Exception handlers
# ============================================================================


@app.exception_handler(CommerceError)
async def commerce_error_handler(request: Request, exc: CommerceError):
    """Translate domain errors into the standard error body."""
    logger.info(
        "request_failed",
        path=request.url.path,
        status=exc.status_code,
        code=exc.error_code.value,
    )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body_for(exc, request.url.path),
        headers=headers,
    )


def _field_messages(exc: RequestValidationError) -> List[FieldMessage]:
    messages = []
    for error in exc.errors():
        # Drop the location prefix ("body", "query", "path")
        loc = [str(part) for part in error.get("loc", ())][1:]
        messages.append(
            FieldMessage(field_name=".".join(loc) or "body", message=error.get("msg", ""))
        )
    return messages


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Translate request validation failures into a 422 with field messages."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=create_error_body(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            message="Invalid data.",
            path=request.url.path,
            error_code=ErrorCode.VAL_INVALID_REQUEST,
            errors=_field_messages(exc),
        ),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render framework HTTP errors (404 route, 405 method) in the standard body."""
    error_code = ErrorCode.RES_NOT_FOUND if exc.status_code == 404 else ErrorCode.SYS_HTTP_ERROR
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_body(
            status_code=exc.status_code,
            message=str(exc.detail),
            path=request.url.path,
            error_code=error_code,
        ),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    sentry_sdk.capture_exception(exc)

    logger.error("unhandled_exception", path=request.url.path, exc_info=exc)

    # Don't expose internal error details in production
    message = (
        "An unexpected error occurred. Please try again later."
        if get_config().is_production
        else str(exc)
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=create_error_body(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message=message,
            path=request.url.path,
            error_code=ErrorCode.SYS_INTERNAL_ERROR,
        ),
    )


def custom_openapi() -> dict[str, Any]:
    """Generate OpenAPI schema with the bearer security scheme."""
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        tags=app.openapi_tags,
    )

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "Access token from POST /oauth2/token. "
            "Include in the Authorization header as `Bearer <token>`.",
        },
        "ClientBasic": {
            "type": "http",
            "scheme": "basic",
            "description": "Client credentials for POST /oauth2/token.",
        },
    }

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi


if __name__ == "__main__":
    import uvicorn

    # Run with: python -m dscommerce.api.app
    uvicorn.run(
        "dscommerce.api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
