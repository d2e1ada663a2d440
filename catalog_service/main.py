# catalog_service/main.py

"""
FastAPI Catalog Service API.
Manages products, categories and group categories for the storefront and the
admin back office. Every failure is reported with the same JSON envelope:
{"success": false, "error": {"code", "message", "details", "timestamp"}}.
"""
import logging
import sys
import time

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__, config
from .db import init_db, shutdown_db
from .errors import CatalogError, ErrorCode
from .routers import categories, group_categories, products

# -----------------------------
# Configure Logging
# -----------------------------
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

# Suppress noisy logs from third-party libraries for cleaner output
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("uvicorn.error").setLevel(logging.INFO)


# -----------------------------
# FastAPI App Initialization
# -----------------------------
app = FastAPI(
    title="Catalog Service API",
    description="Manages products, categories and group categories for a storefront",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(categories.router)
app.include_router(group_categories.router)
app.include_router(products.router)


# --- Error Envelope ---
def error_response(error: CatalogError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# Status codes raised by the framework itself (unknown route, wrong method...)
_HTTP_STATUS_CODES = {
    401: ErrorCode.GENERIC_UNAUTHORIZED,
    403: ErrorCode.GENERIC_FORBIDDEN,
    404: ErrorCode.GENERIC_NOT_FOUND,
    408: ErrorCode.API_TIMEOUT,
    409: ErrorCode.GENERIC_CONFLICT,
    429: ErrorCode.API_RATE_LIMIT_EXCEEDED,
    503: ErrorCode.API_SERVICE_UNAVAILABLE,
}


@app.exception_handler(CatalogError)
async def catalog_error_handler(request, exc: CatalogError):
    log = logger.error if exc.status_code >= 500 else logger.info
    log(f"{request.method} {request.url.path} -> {exc.code.value} [{exc.status_code}]: {exc.message}")
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request, exc: RequestValidationError):
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    logger.info(f"{request.method} {request.url.path} -> malformed request: {errors}")
    return error_response(
        CatalogError(ErrorCode.API_INVALID_REQUEST, "Malformed request", {"errors": errors})
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    if exc.status_code in _HTTP_STATUS_CODES:
        code = _HTTP_STATUS_CODES[exc.status_code]
    elif exc.status_code >= 500:
        code = ErrorCode.GENERIC_INTERNAL_ERROR
    else:
        code = ErrorCode.GENERIC_BAD_REQUEST
    return error_response(
        CatalogError(code, str(exc.detail), {"path": request.url.path, "statusCode": exc.status_code})
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    if isinstance(exc, OperationalError):
        return error_response(CatalogError(ErrorCode.DATABASE_CONNECTION_FAILED))
    return error_response(CatalogError(ErrorCode.DATABASE_QUERY_FAILED))


@app.exception_handler(Exception)
async def unhandled_error_handler(request, exc: Exception):
    logger.critical(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return error_response(CatalogError(ErrorCode.GENERIC_INTERNAL_ERROR))


# --- FastAPI Event Handlers ---
@app.on_event("startup")
async def startup_event():
    """
    Ensures database tables exist, retrying while the database comes up.
    """
    max_retries = config.DB_CONNECT_RETRIES
    retry_delay_seconds = config.DB_CONNECT_RETRY_DELAY
    for i in range(max_retries):
        try:
            logger.info(
                f"Attempting to connect to the database and create tables (attempt {i+1}/{max_retries})..."
            )
            init_db()
            logger.info("Successfully connected to the database and ensured tables exist.")
            break
        except OperationalError as e:
            logger.warning(f"Failed to connect to the database: {e}")
            if i < max_retries - 1:
                logger.info(f"Retrying in {retry_delay_seconds} seconds...")
                time.sleep(retry_delay_seconds)
            else:
                logger.critical(
                    f"Failed to connect to the database after {max_retries} attempts. Exiting application."
                )
                sys.exit(1)
        except Exception as e:
            logger.critical(
                f"An unexpected error occurred during database startup: {e}",
                exc_info=True,
            )
            sys.exit(1)


@app.on_event("shutdown")
async def shutdown_event():
    shutdown_db()


# --- Root Endpoint ---
@app.get("/", status_code=status.HTTP_200_OK, summary="Root endpoint")
async def read_root():
    """
    Returns a welcome message for the Catalog Service.
    """
    return {"message": "Welcome to the Catalog Service!"}


# --- Health Check Endpoint ---
@app.get("/health", status_code=status.HTTP_200_OK, summary="Health check endpoint")
async def health_check():
    """
    A simple health check endpoint to verify the service is running.
    """
    return {"status": "ok", "service": "catalog-service"}
