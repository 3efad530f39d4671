import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from .api.v1.api import api_router
from .config import settings
from .core.exceptions import SocialNetError
from .database import get_db
from .services.deletion_service import CascadeError
from .services.firebase_service import firebase_service

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    firebase_service.initialize()
    yield


# Create FastAPI app
app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)


@app.exception_handler(SocialNetError)
async def handle_domain_error(request: Request, exc: SocialNetError):
    status_code = exc.status_code
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    if status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=status_code, content={"detail": exc.detail}, headers=headers)


@app.exception_handler(CascadeError)
async def handle_cascade_error(request: Request, exc: CascadeError):
    # Earlier steps stay committed; report how far the cascade got
    logger.error(f"{exc} on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={
        "detail": f"Deletion interrupted at step '{exc.step}'",
        "completed_steps": exc.result.completed_steps,
        "deleted": exc.result.deleted,
    })


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(api_router)


# Root endpoint
@app.get("/")
def read_root():
    return {
        "message": "Welcome to SocialNet API",
        "version": settings.API_VERSION,
        "status": "running"
    }


# Health check endpoint
@app.get("/health")
def health_check():
    """API health check"""
    return {"status": "healthy", "push_enabled": firebase_service.is_initialized()}


# Database test endpoint
@app.get("/db-test")
def test_database(db: Session = Depends(get_db)):
    """Test database connection"""
    db.execute(text("SELECT 1"))
    return {
        "status": "success",
        "message": "Database connection successful",
    }
