"""
Concept Learning API
Application factory wiring: middleware, error envelope, routers and system endpoints
"""

from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from db import engine
from routes import auth, concepts, modules
from utils.auth_middleware import add_auth_context_to_request
from utils.error_handling import AppError

# Configure structured logging
from utils.structured_logging import configure_logging, get_logger, log_request_middleware, LogCategory

configure_logging(level=settings.LOG_LEVEL, json_output=True)
logger = get_logger("app")

from schemas.openapi_models import COMMON_RESPONSES, OpenAPIMetadata, OpenAPITags

app = FastAPI(
    title=OpenAPIMetadata.TITLE,
    description=OpenAPIMetadata.DESCRIPTION,
    version=OpenAPIMetadata.VERSION,
    contact=OpenAPIMetadata.CONTACT,
    license_info=OpenAPIMetadata.LICENSE_INFO,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=[
        OpenAPITags.AUTH,
        OpenAPITags.MODULES,
        OpenAPITags.CONCEPTS,
        OpenAPITags.SYSTEM,
    ],
)

# Credentials are allowed so the refresh cookie travels cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept", "Origin"],
    expose_headers=["Content-Length", "X-Request-ID", "X-Correlation-ID"],
)


# Structured logging middleware - adds correlation IDs and logs all requests
@app.middleware("http")
async def structured_logging_middleware(request: Request, call_next):
    return await log_request_middleware(request, call_next)


# Authentication middleware - decodes the bearer token into request state
@app.middleware("http")
async def auth_middleware(request: Request, call_next):
    return await add_auth_context_to_request(request, call_next)


def error_envelope(request: Request, status_code: int, error, detail) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "detail": detail,
            "status_code": status_code,
            "request_id": getattr(request.state, "request_id", None),
            "correlation_id": getattr(request.state, "correlation_id", None),
        },
        headers={"WWW-Authenticate": "Bearer"} if status_code == 401 else None,
    )


# Global exception handlers
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Typed service errors carry their own status code"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        exc.message,
        category=LogCategory.ERROR,
        request_method=request.method,
        request_path=request.url.path,
        response_status=exc.status_code,
        error_type=type(exc).__name__,
        user_id=getattr(request.state, "user_id", None),
    )
    return error_envelope(request, exc.status_code, exc.message, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        errors.append(
            {"field": ".".join(str(loc) for loc in error["loc"]), "message": error["msg"], "code": error["type"]}
        )

    logger.warning(
        "Validation error",
        category=LogCategory.ERROR,
        request_method=request.method,
        request_path=request.url.path,
        error_type="ValidationError",
        error_message=f"{len(errors)} validation errors",
        extra={"errors": errors},
    )

    return error_envelope(request, 400, "Validation Error", errors)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        logger.error(
            f"HTTP {exc.status_code} error",
            category=LogCategory.ERROR,
            request_method=request.method,
            request_path=request.url.path,
            response_status=exc.status_code,
            error_message=str(exc.detail),
        )
    elif exc.status_code >= 400:
        logger.warning(
            f"HTTP {exc.status_code} client error",
            category=LogCategory.ERROR,
            request_method=request.method,
            request_path=request.url.path,
            response_status=exc.status_code,
            error_message=str(exc.detail),
        )

    return error_envelope(request, exc.status_code, exc.detail, exc.detail)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.critical(
        "Unexpected server error",
        category=LogCategory.ERROR,
        exception=exc,
        request_method=request.method,
        request_path=request.url.path,
        user_id=getattr(request.state, "user_id", None),
    )
    return error_envelope(
        request, 500, "Internal Server Error", "An unexpected error occurred. Please try again later."
    )


app.include_router(auth.router, prefix="/api/auth", tags=[OpenAPITags.AUTH["name"]], responses=COMMON_RESPONSES)
app.include_router(modules.router, prefix="/api", tags=[OpenAPITags.MODULES["name"]], responses=COMMON_RESPONSES)
app.include_router(concepts.router, prefix="/api", tags=[OpenAPITags.CONCEPTS["name"]], responses=COMMON_RESPONSES)


@app.get("/", tags=[OpenAPITags.SYSTEM["name"]], summary="API Information")
async def root():
    return {
        "name": OpenAPIMetadata.TITLE,
        "version": OpenAPIMetadata.VERSION,
        "status": "operational",
        "environment": settings.NODE_ENV,
        "documentation": {"swagger": "/docs", "redoc": "/redoc", "openapi_spec": "/openapi.json"},
        "timestamp": datetime.utcnow().isoformat(),
        "services": {
            "auth": {"endpoint": "/api/auth", "description": "Accounts, tokens and sessions"},
            "modules": {"endpoint": "/api/modules", "description": "Module overview, themes and reflections"},
            "concepts": {"endpoint": "/api/concepts", "description": "Tutorials, quizzes, summaries and progress"},
        },
    }


@app.get("/health", tags=[OpenAPITags.SYSTEM["name"]], summary="Health Check")
def health_check():
    """
    ## Service Health Check

    Reports `healthy` when the database answers a trivial query, `degraded` otherwise.
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        database = "operational"
    except SQLAlchemyError as e:
        logger.error("Health check database probe failed", category=LogCategory.DATABASE, exception=e)
        database = "unavailable"

    return {
        "status": "healthy" if database == "operational" else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "version": OpenAPIMetadata.VERSION,
        "checks": {"database": database},
    }
