from fastapi import FastAPI, Request, status, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from contextlib import asynccontextmanager
import logging
import traceback
import uvicorn

from config import settings
from database import init_db

# Import API routers
from app.api.endpoints import financial

from app.core.exceptions import ValidationError as LedgerValidationError
from app.core.logging import configure_logging
from app.core.middleware import RequestLoggingMiddleware
from app.services.ledger_repository import InMemoryTransactionRepository

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


# Get CORS origins from settings
def get_cors_origins():
    """Get CORS origins from settings or use defaults"""
    cors_env = settings.BACKEND_CORS_ORIGINS
    if cors_env:
        # Split by comma and strip whitespace
        return [origin.strip() for origin in cors_env.split(",") if origin.strip()]
    # Default origins for development
    return [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]


def cors_headers_for(request: Request) -> dict:
    """CORS headers for error responses, so browsers can read the error body"""
    origin = request.headers.get("origin")
    if not origin:
        return {}

    is_allowed = origin in get_cors_origins()
    if not is_allowed and settings.ENVIRONMENT == "development":
        # In development, allow localhost origins
        is_allowed = origin.startswith("http://localhost:") or origin.startswith("http://127.0.0.1:")

    if not is_allowed:
        return {}
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "*",
        "Access-Control-Allow-Headers": "*",
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info("%s starting up (ledger backend: %s)", settings.APP_NAME, settings.LEDGER_BACKEND)

    if settings.LEDGER_BACKEND == "database":
        await init_db()
        logger.info("Financial tables ready")
    else:
        app.state.ledger_repository = InMemoryTransactionRepository()

    yield

    logger.info("%s shutting down", settings.APP_NAME)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Dental clinic patient financial ledger API",
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# Configure CORS FIRST so headers are present even on errors
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_origin_regex=r"http://(localhost|127\.0\.0\.1):\d+" if settings.ENVIRONMENT == "development" else None,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time"],
)
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(LedgerValidationError)
async def ledger_validation_exception_handler(request: Request, exc: LedgerValidationError):
    """Report rejected ledger input with field-level detail"""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": [
                {"loc": ["body", error.field], "msg": error.message, "type": "value_error"}
                for error in exc.errors
            ]
        },
        headers=cors_headers_for(request)
    )


# Exception handler for HTTPException to ensure CORS headers
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTPException with CORS headers"""
    headers = cors_headers_for(request)
    # Merge with any existing headers from the exception
    if getattr(exc, "headers", None):
        headers.update(exc.headers)

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers
    )


# Global exception handler to ensure CORS headers are always present
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler that ensures CORS headers are present on all error responses"""
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    headers = cors_headers_for(request)

    # In development, include traceback
    if settings.ENVIRONMENT == "development":
        traceback_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": str(exc),
                "type": type(exc).__name__,
                "traceback": traceback_str.split("\n"),
            },
            headers=headers
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
        headers=headers
    )


# Include API routers with versioning
API_V1_PREFIX = settings.API_V1_PREFIX

app.include_router(financial.router, prefix=API_V1_PREFIX, tags=["Financial"])

# Legacy /api routes for backward compatibility (deprecated)
app.include_router(financial.router, prefix="/api", tags=["Financial (Legacy)"], deprecated=True)


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"status": "healthy"}


@app.get("/favicon.ico")
async def favicon():
    """Return empty favicon to avoid 404 errors"""
    return Response(status_code=204)


@app.get("/api/health")
async def health_check():
    """Detailed health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "ledger_backend": settings.LEDGER_BACKEND,
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
