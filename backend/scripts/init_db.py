"""
Create the resume_documents table
"""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from roast_storage.core.config import settings
from roast_storage.core.database import build_engine, init_db
from roast_storage.core.logging_config import configure_logging
import structlog

logger = structlog.get_logger()


async def main():
    """Main initialization function"""
    logger.info("initializing_database")
    engine = build_engine(settings)
    try:
        await init_db(engine)
        logger.info("database_initialization_complete")
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    configure_logging(settings)
    asyncio.run(main())
