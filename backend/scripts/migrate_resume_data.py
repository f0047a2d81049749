"""
Import legacy resume documents into the canonical store

Reads a JSON Lines export (one legacy document per line), normalizes each
document and saves it through the persistence gateway.

Usage: python scripts/migrate_resume_data.py legacy_resumes.jsonl
"""
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from roast_storage.core.config import settings
from roast_storage.core.database import build_engine, init_db
from roast_storage.core.exceptions import RoastStorageException
from roast_storage.core.logging_config import configure_logging
from roast_storage.resumes.migration import needs_migration, normalize_legacy_document
from roast_storage.resumes.storage_service import build_storage_service
import structlog

logger = structlog.get_logger()


async def migrate_resume_data(export_path: Path):
    engine = build_engine(settings)
    await init_db(engine)
    service = build_storage_service(settings, engine)

    migrated, skipped, failed = 0, 0, 0
    try:
        with export_path.open(encoding="utf-8") as export:
            for line_number, line in enumerate(export, start=1):
                if not line.strip():
                    continue
                legacy = json.loads(line)
                document = normalize_legacy_document(legacy) if needs_migration(legacy) else legacy

                if await service.get_resume(document["resumeId"]):
                    skipped += 1
                    continue

                try:
                    await service.gateway.save(document)
                    migrated += 1
                except RoastStorageException as e:
                    failed += 1
                    logger.error("resume_migration_failed", line=line_number, error=e.message)
    finally:
        await engine.dispose()

    print("\n📊 Migration Summary:")
    print(f"✅ Migrated: {migrated}")
    print(f"⏭️  Already present: {skipped}")
    print(f"❌ Failed: {failed}")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    configure_logging(settings)
    asyncio.run(migrate_resume_data(Path(sys.argv[1])))
