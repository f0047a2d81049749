"""
Check resume data quality in database
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from roast_storage.core.config import settings
from roast_storage.core.database import build_engine
from roast_storage.core.logging_config import configure_logging
from roast_storage.resumes.storage_service import build_storage_service


async def check_resume_data(limit: int = 5):
    """Report missing fields and show the newest documents"""
    engine = build_engine(settings)
    service = build_storage_service(settings, engine)
    try:
        report = await service.get_data_quality_report()
        print(f"\n{'='*80}")
        print("RESUME DATA QUALITY CHECK")
        print(f"{'='*80}\n")
        print(f"Total Resumes: {report['total']}\n")

        for issue, count in report.items():
            if issue == "total":
                continue
            marker = "✅" if count == 0 else "❌"
            print(f"  {marker} {issue.replace('_', ' ').title()}: {count}")

        summaries = await service.list_resumes(limit=limit)
        if not summaries:
            print("\nℹ️  No resumes stored yet")
            return

        print(f"\n{'─'*80}")
        print(f"Newest {len(summaries)} resumes:")
        for summary in summaries:
            print(
                f"  {summary.resume_id} | {summary.file_name} | "
                f"score {summary.overall_score:g} | "
                f"{summary.candidate_name or 'N/A'} | {summary.uploaded_at.isoformat()}"
            )
        print(f"\n{'='*80}\n")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    configure_logging(settings)
    asyncio.run(check_resume_data())
