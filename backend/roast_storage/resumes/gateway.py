"""
Persistence gateway - schema validation and retrying writes for resume records
"""
import copy
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import async_sessionmaker
import structlog

from roast_storage.core.exceptions import NotFoundError, StorageError, ValidationError
from roast_storage.models.resume import ResumeDocument
from roast_storage.resumes.schemas import ResumeRecord, ResumeSummary, ScoreSummary
from roast_storage.utils.retry import RetryExhaustedError, linear_backoff, with_retry

logger = structlog.get_logger()

RecordInput = Union[ResumeRecord, Mapping[str, Any]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _deep_merge(base: Dict[str, Any], changes: Mapping[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in changes.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _touch(document: Dict[str, Any], now: datetime) -> None:
    timestamps = document.get("timestamps")
    if isinstance(timestamps, Mapping):
        document["timestamps"] = {**timestamps, "updatedAt": now}


def validate_record(document: RecordInput) -> ResumeRecord:
    """Validate against the ResumeRecord schema, raising ValidationError with the violated fields"""
    if isinstance(document, ResumeRecord):
        document = document.to_document()
    try:
        return ResumeRecord.model_validate(document)
    except SchemaValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise ValidationError("Resume record failed schema validation", errors=errors) from e


class PersistenceGateway:
    """Durable storage of resume records with bounded retries"""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        max_retries: int = 3,
        backoff_seconds: float = 1.0,
    ):
        self.session_factory = session_factory
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    async def save(self, record: RecordInput) -> ResumeRecord:
        """
        Validate and insert a new record

        Schema violations raise ValidationError on the first attempt and are
        never retried. Any other failure is retried with linear backoff; once
        attempts are exhausted a StorageError wraps the last error.
        """
        document = record.to_document() if isinstance(record, ResumeRecord) else dict(record)

        async def attempt() -> ResumeRecord:
            _touch(document, _utcnow())
            validated = validate_record(document)
            await self._insert(validated)
            return validated

        saved = await self._run(attempt, "resume_save", document.get("resumeId"))
        logger.info("resume_document_saved", resume_id=saved.resume_id)
        return saved

    async def update(self, resume_id: str, changes: Mapping[str, Any]) -> ResumeRecord:
        """Deep-merge ``changes`` into a stored record; resumeId is immutable"""
        if "resumeId" in changes and changes["resumeId"] != resume_id:
            raise ValidationError("Resume record failed schema validation", errors=["resumeId: immutable"])

        async def attempt() -> ResumeRecord:
            async with self.session_factory() as session:
                row = await self._find_row(session, resume_id)
                if row is None:
                    raise NotFoundError("Resume", resume_id)

                merged = _deep_merge(row.document, changes)
                _touch(merged, _utcnow())
                validated = validate_record(merged)
                self._apply(row, validated)
                await session.commit()
                return validated

        updated = await self._run(attempt, "resume_update", resume_id)
        logger.info("resume_document_updated", resume_id=resume_id)
        return updated

    async def get(self, resume_id: str) -> Optional[ResumeRecord]:
        async with self.session_factory() as session:
            row = await self._find_row(session, resume_id)
            if row is None:
                return None
            return ResumeRecord.model_validate(row.document)

    async def delete(self, resume_id: str) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                delete(ResumeDocument).where(ResumeDocument.resume_id == resume_id)
            )
            await session.commit()
        deleted = result.rowcount > 0
        logger.info("resume_document_deleted", resume_id=resume_id, deleted=deleted)
        return deleted

    async def purge_uploaded_before(self, cutoff: datetime) -> int:
        """Delete every record uploaded before ``cutoff``"""
        async with self.session_factory() as session:
            result = await session.execute(
                delete(ResumeDocument).where(ResumeDocument.uploaded_at < cutoff)
            )
            await session.commit()
        logger.info("resume_documents_purged", cutoff=cutoff.isoformat(), deleted=result.rowcount)
        return result.rowcount

    async def count(self, since: Optional[datetime] = None) -> int:
        query = select(func.count(ResumeDocument.id))
        if since is not None:
            query = query.where(ResumeDocument.uploaded_at >= since)
        async with self.session_factory() as session:
            return (await session.execute(query)).scalar_one()

    async def list_summaries(self, limit: int = 50, offset: int = 0) -> List[ResumeSummary]:
        """Dashboard projection, newest upload first"""
        query = (
            select(
                ResumeDocument.resume_id,
                ResumeDocument.original_file_name,
                ResumeDocument.overall_score,
                ResumeDocument.uploaded_at,
                ResumeDocument.candidate_name,
            )
            .order_by(ResumeDocument.uploaded_at.desc(), ResumeDocument.id.desc())
            .offset(offset)
            .limit(limit)
        )
        async with self.session_factory() as session:
            rows = (await session.execute(query)).all()

        return [
            ResumeSummary(
                resume_id=row.resume_id,
                file_name=row.original_file_name,
                overall_score=row.overall_score,
                uploaded_at=_as_utc(row.uploaded_at),
                candidate_name=row.candidate_name,
            )
            for row in rows
        ]

    async def score_summary(self) -> ScoreSummary:
        query = select(
            func.count(ResumeDocument.id),
            func.avg(ResumeDocument.overall_score),
            func.min(ResumeDocument.overall_score),
            func.max(ResumeDocument.overall_score),
        )
        async with self.session_factory() as session:
            count, average, minimum, maximum = (await session.execute(query)).one()

        return ScoreSummary(
            count=count,
            average=round(float(average), 1) if average is not None else None,
            min=minimum,
            max=maximum,
        )

    async def iter_documents(self, batch_size: int = 100) -> AsyncIterator[Dict[str, Any]]:
        """Yield raw stored documents in insertion order"""
        last_id = 0
        while True:
            query = (
                select(ResumeDocument.id, ResumeDocument.document)
                .where(ResumeDocument.id > last_id)
                .order_by(ResumeDocument.id)
                .limit(batch_size)
            )
            async with self.session_factory() as session:
                rows = (await session.execute(query)).all()
            if not rows:
                return
            for row in rows:
                yield row.document
            last_id = rows[-1].id

    async def _run(self, attempt, operation_name: str, resume_id: Optional[str]) -> ResumeRecord:
        try:
            return await with_retry(
                attempt,
                max_attempts=self.max_attempts,
                backoff=linear_backoff(self.backoff_seconds),
                give_up_on=(ValidationError, NotFoundError),
                operation_name=operation_name,
            )
        except ValidationError as e:
            logger.warning("resume_schema_violation", resume_id=resume_id, errors=e.errors)
            raise
        except RetryExhaustedError as e:
            logger.error(
                "resume_write_failed",
                resume_id=resume_id,
                attempts=e.attempts,
                error=str(e.last_error),
            )
            raise StorageError(
                "Failed to write resume record",
                attempts=e.attempts,
                last_error=e.last_error,
            ) from e.last_error

    async def _insert(self, record: ResumeRecord) -> None:
        async with self.session_factory() as session:
            row = ResumeDocument(resume_id=record.resume_id)
            self._apply(row, record)
            session.add(row)
            await session.commit()

    @staticmethod
    async def _find_row(session, resume_id: str) -> Optional[ResumeDocument]:
        result = await session.execute(
            select(ResumeDocument).where(ResumeDocument.resume_id == resume_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _apply(row: ResumeDocument, record: ResumeRecord) -> None:
        name = record.extracted_info.personal_info.name
        client_ip = record.metadata.client_ip
        row.original_file_name = record.file_info.original_file_name[:255]
        row.candidate_name = name[:255] if name else None
        row.overall_score = record.analysis.overall_score
        row.roast_level = record.preferences.roast_level[:50]
        row.client_ip = client_ip[:64] if client_ip else None
        row.uploaded_at = record.timestamps.uploaded_at
        row.updated_at = record.timestamps.updated_at or record.timestamps.uploaded_at
        row.document = record.to_document()
