"""
Delete resumes older than the configured retention window
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from roast_storage.core.config import settings
from roast_storage.core.database import build_engine
from roast_storage.core.logging_config import configure_logging
from roast_storage.resumes.storage_service import build_storage_service


async def purge_expired_resumes():
    engine = build_engine(settings)
    service = build_storage_service(settings, engine)
    try:
        deleted = await service.purge_expired()
        print(f"✅ Deleted {deleted} resumes older than {settings.DATA_RETENTION_DAYS} days")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    configure_logging(settings)
    asyncio.run(purge_expired_resumes())
