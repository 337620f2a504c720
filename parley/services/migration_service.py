import asyncio
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import make_url

from parley.core.config import settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def _ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    if "sqlite" not in database_url or ":memory:" in database_url:
        return
    db_path = make_url(database_url).database
    if not db_path:
        return
    db_dir = Path(db_path).parent
    if not db_dir.exists():
        logger.info(f"Creating database directory: {db_dir}")
        db_dir.mkdir(parents=True, exist_ok=True)


def _upgrade_to_head() -> None:
    config = Config(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    config.attributes["skip_logging"] = True
    command.upgrade(config, "head")


async def run_migrations():
    """Run database migrations up to head using alembic programmatically."""
    logger.info("Running database migrations...")
    try:
        _ensure_sqlite_directory(settings.DATABASE_URL)
        # env.py drives its own event loop, so keep it off the running one
        await asyncio.to_thread(_upgrade_to_head)
        logger.info("Migrations completed successfully")
    except Exception as e:
        logger.error(f"Migration failed: {e}", exc_info=True)
        raise RuntimeError("Database migration failed") from e
