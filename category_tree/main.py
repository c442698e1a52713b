"""Main FastAPI application."""

import logging
import re
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from . import __version__
from .database import engine, Base, get_db, SessionLocal, DATABASE_URL
from .api import categories_router
from .core.config import settings, ConfigurationError, Environment
from .core.logging_config import setup_logging
from .middleware.exception_handler import category_tree_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .exceptions import CategoryTreeError
from .models import Category

setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


def _mask_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


def _validate_database_connection() -> None:
    """Test that the database is reachable. Exits with a clear message on failure."""
    masked = _mask_url(DATABASE_URL)
    logger.info("Connecting to database: %s", masked)

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
    except Exception as e:
        logger.critical(
            "Database connection failed.\n"
            f"  DATABASE_URL: {masked}\n"
            f"  Error: {e}"
        )
        raise SystemExit(1) from e


_validate_database_connection()
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT and not settings.auth_enabled:
        logger.warning(
            "SECURITY: Authentication is disabled (AUTH_ENABLED=false). "
            "Every request acts as %s.",
            settings.dev_user_id,
        )

    if settings.seed_shared_categories:
        from .core.seeder import seed_shared_categories
        db = SessionLocal()
        try:
            seeded = seed_shared_categories(db)
            if seeded > 0:
                logger.info(f"First startup: seeded {seeded} shared categories")
        except CategoryTreeError as e:
            logger.warning(f"Seed loading failed (non-fatal): {e.message}")
        finally:
            db.close()

    yield


app = FastAPI(
    title="Category Tree API",
    description=(
        "Ordered category tree with drag-and-drop placement. Private categories "
        "belong to one user; shared categories are visible to everyone.\n\n"
        "**Authentication:** When `AUTH_ENABLED=true`, write endpoints require a "
        "`Bearer` token. The tree endpoint accepts anonymous callers and returns "
        "shared categories only."
    ),
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(CategoryTreeError, category_tree_exception_handler)

app.include_router(categories_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "Category Tree API",
        "version": __version__,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Database status, uptime and category count.

    Never raises: returns degraded status on DB failure so load balancers
    can still probe without receiving 5xx.
    """
    db_status = "ok"
    category_count = 0
    try:
        category_count = db.query(Category).count()
    except Exception:
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": __version__,
        "category_count": category_count,
    }
