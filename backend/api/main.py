"""Main FastAPI application"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging
import time
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from tradejournal.log_config import get_logger
from tradejournal.config import settings as journal_settings
from tradejournal.db.session import check_db_health, init_db
from tradejournal.utils.credentials import check_backend_credentials, log_credential_report
from tradejournal.utils.errors import DatabaseError, DuplicateRecordError, RecordNotFoundError, TradeJournalError

from api.config import settings
from api.ratelimit import limiter
from api.routers import auth, trades, strategies, confluence
from api.schemas.errors import ErrorCode
from api.utils.exceptions import TradeJournalException

logger = logging.getLogger(__name__)
access_logger = get_logger("api.access")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    # Startup
    logger.info("Starting Trade Journal API...")

    init_db()
    logger.info("Database tables created/verified")

    log_credential_report(journal_settings)

    yield

    # Shutdown
    logger.info("Shutting down Trade Journal API...")


# Create FastAPI app
app = FastAPI(
    title=settings.API_TITLE,
    description="Trading journal: trade logging, strategies and performance analytics.",
    version=settings.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "authentication", "description": "Registration, login and session lookup"},
        {"name": "trades", "description": "Trade logging"},
        {"name": "strategies", "description": "Strategies and their rules"},
        {"name": "confluence", "description": "Dashboard trade feed and statistics"},
    ]
)

# Add SlowAPI state and middleware
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS + journal_settings.origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["content-type", "authorization", "apikey"],
)


# Access logging middleware
@app.middleware("http")
async def access_log_middleware(request: Request, call_next):
    """Log all API requests with status and timing"""
    t0 = time.time()
    response = await call_next(request)
    ms = int((time.time() - t0) * 1000)

    access_logger.info(
        "request",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=ms,
    )

    return response


def _error_response(status_code: int, error_code: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "status_code": status_code,
        }
    )


# Global exception handlers
@app.exception_handler(TradeJournalException)
async def trade_journal_exception_handler(request: Request, exc: TradeJournalException):
    """Handle custom API exceptions with standard format"""
    return _error_response(exc.status_code, exc.error_code, str(exc.detail), exc.details)


@app.exception_handler(RecordNotFoundError)
async def record_not_found_handler(request: Request, exc: RecordNotFoundError):
    return _error_response(status.HTTP_404_NOT_FOUND, ErrorCode.NOT_FOUND, exc.message, exc.details or None)


@app.exception_handler(DuplicateRecordError)
async def duplicate_record_handler(request: Request, exc: DuplicateRecordError):
    return _error_response(status.HTTP_400_BAD_REQUEST, ErrorCode.ALREADY_EXISTS, exc.message, exc.details or None)


@app.exception_handler(TradeJournalError)
async def core_error_handler(request: Request, exc: TradeJournalError):
    """Core library errors that escaped a router"""
    logger.error(f"Unhandled core error on {request.url.path}: {exc.to_dict()}")
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.DATABASE_ERROR if isinstance(exc, DatabaseError) else ErrorCode.INTERNAL_ERROR,
        "An unexpected error occurred",
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return _error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        ErrorCode.RATE_LIMIT_EXCEEDED,
        f"Rate limit exceeded: {exc.detail}",
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTPException with standard format"""
    # Map status codes to error codes
    error_code_map = {
        400: ErrorCode.INVALID_INPUT,
        401: ErrorCode.UNAUTHORIZED,
        403: ErrorCode.FORBIDDEN,
        404: ErrorCode.NOT_FOUND,
        429: ErrorCode.RATE_LIMIT_EXCEEDED,
        500: ErrorCode.INTERNAL_ERROR,
    }

    error_code = error_code_map.get(exc.status_code, "HTTP_ERROR")

    response = _error_response(exc.status_code, error_code, str(exc.detail), getattr(exc, "details", None))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors"""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return _error_response(
        422,
        ErrorCode.VALIDATION_ERROR,
        "Validation error",
        {"errors": errors},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all for unexpected errors"""
    logger.exception("Unhandled exception")
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.INTERNAL_ERROR,
        "An unexpected error occurred",
    )


# Include routers
app.include_router(auth.router)
app.include_router(trades.router)
app.include_router(strategies.router)
app.include_router(confluence.router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs": "/docs",
    }


@app.get("/healthz")
async def healthz():
    """Database connectivity and backend credential report"""
    db = check_db_health()
    return JSONResponse(
        status_code=status.HTTP_200_OK if db["healthy"] else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ok" if db["healthy"] else "degraded",
            "database": db,
            "credentials": check_backend_credentials(journal_settings),
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT)
