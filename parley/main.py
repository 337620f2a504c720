import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from parley.api.common import register_exception_handlers
from parley.api.routes import conversations, messages
from parley.auth_config import auth_backend, fastapi_users
from parley.core.config import settings
from parley.db import check_database_health
from parley.schemas.user import UserCreate, UserRead
from parley.services.migration_service import run_migrations

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting application...")
    try:
        await run_migrations()

        # Tables may be managed outside alembic (e.g. by a test harness)
        skip_table_check = os.getenv("SKIP_TABLE_CHECK") == "true"
        await check_database_health(skip_table_check=skip_table_check)
        logger.info("Database health check passed - application ready")
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        logger.error("Application startup aborted due to database issues")
        raise

    yield

    logger.info("Application shutting down...")


app = FastAPI(title="Parley", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

register_exception_handlers(app)

app.include_router(
    fastapi_users.get_auth_router(auth_backend), prefix="/auth/jwt", tags=["auth"]
)
app.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/auth",
    tags=["auth"],
)
app.include_router(
    conversations.conversations_router_instance, prefix=settings.FUNCTIONS_PREFIX
)
app.include_router(messages.messages_router_instance, prefix=settings.FUNCTIONS_PREFIX)


@app.get("/health")
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("parley.main:app", host="0.0.0.0", port=8000)
