"""
FastAPI application for stock sheet imports.

This module creates and configures the FastAPI application, registering
all routers and middleware.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.config import settings
from api.dependencies import engine, get_db
from api.routers import import_router, stock, upload_router
from api.schemas.common import DatabaseHealthResponse, ErrorResponse, HealthCheckResponse
from backend.models.schema import Base

# Configure logging
handlers = [logging.StreamHandler()]
if settings.LOG_FILE:
    handlers.append(logging.FileHandler(settings.LOG_FILE))

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT,
    handlers=handlers
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.API_TITLE} v{settings.API_VERSION}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[-1]}")  # Hide credentials

    # Ensure database tables exist
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables verified")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")

    yield

    # Shutdown
    logger.info("Shutting down application")
    engine.dispose()


# Create FastAPI application
app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS
)


# Exception handlers

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            detail={"message": str(exc)} if settings.DEBUG else None,
            path=str(request.url)
        ).model_dump(mode='json')
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors (including unknown routes) as ErrorResponse."""
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        error = "Resource not found"
    else:
        error = str(exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=error,
            detail={"path": request.url.path},
            path=str(request.url)
        ).model_dump(mode='json'),
        headers=getattr(exc, 'headers', None)
    )


# Register routers
app.include_router(upload_router.router)  # /upload is served outside the API prefix
app.include_router(stock.router, prefix=settings.API_PREFIX)
app.include_router(import_router.router, prefix=settings.API_PREFIX)


# Root endpoints

@app.get('/', include_in_schema=False)
async def root():
    """
    Root endpoint - short usage note.
    """
    return {
        'message': f'{settings.API_TITLE} is running',
        'version': settings.API_VERSION,
        'upload': 'POST /upload (multipart: file, warehouse[, custom_name])',
        'prices': f'GET {settings.API_PREFIX}/stock?warehouse=prices returns [{{code, price}}]',
        'docs': '/docs'
    }


@app.get('/health', response_model=HealthCheckResponse, tags=['health'])
async def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    **Example:**
    ```bash
    curl http://localhost:3000/health
    ```
    """
    health_status = {
        'status': 'healthy',
        'timestamp': datetime.utcnow(),
        'version': settings.API_VERSION,
        'database': 'unknown'
    }

    # Check database
    try:
        db.execute(text('SELECT 1'))
        health_status['database'] = 'connected'
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status['database'] = 'disconnected'
        health_status['status'] = 'unhealthy'

    return HealthCheckResponse(**health_status)


@app.get('/health/db', response_model=DatabaseHealthResponse, tags=['health'])
async def database_health(db: Session = Depends(get_db)):
    """
    Database ping.

    **Returns:**
    - 200 `{"ok": true}` when the database answers
    - 500 `{"ok": false, "error": ...}` otherwise
    """
    try:
        db.execute(text('SELECT 1'))
    except Exception as e:
        logger.error(f"DB health error: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=DatabaseHealthResponse(ok=False, error=str(e)).model_dump()
        )

    return DatabaseHealthResponse(ok=True)


@app.get('/api/ping', tags=['health'])
async def ping():
    """
    Simple ping endpoint for load balancers.

    **Returns:**
    ```json
    {"ping": "pong"}
    ```
    """
    return {'ping': 'pong'}


# Middleware for request logging

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests."""
    logger.info(f"{request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"{request.method} {request.url.path} - {response.status_code}")
    return response


if __name__ == '__main__':
    import uvicorn

    uvicorn.run(
        'api.main:app',
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower()
    )
