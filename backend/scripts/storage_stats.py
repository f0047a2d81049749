"""
Print storage statistics and the score summary
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from roast_storage.core.config import settings
from roast_storage.core.database import build_engine
from roast_storage.core.logging_config import configure_logging
from roast_storage.resumes.storage_service import build_storage_service


async def storage_stats():
    engine = build_engine(settings)
    service = build_storage_service(settings, engine)
    try:
        stats = await service.get_storage_stats()
        if stats["status"] != "healthy":
            print(f"❌ Storage unavailable: {stats.get('error')}")
            return

        summary = await service.get_score_summary()
        print(f"\n{'='*60}")
        print("STORAGE STATISTICS")
        print(f"{'='*60}\n")
        print(f"Total Resumes: {stats['total_resumes']}")
        print(f"Uploaded in last {settings.RECENT_WINDOW_HOURS}h: {stats['recent_resumes']}")
        if summary.count:
            print(f"Average Score: {summary.average}")
            print(f"Score Range: {summary.min} - {summary.max}")
        else:
            print("No scored resumes yet")
        print(f"\n{'='*60}\n")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    configure_logging(settings)
    asyncio.run(storage_stats())
