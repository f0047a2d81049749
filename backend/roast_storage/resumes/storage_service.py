"""
Resume storage service - the single entry point for saving analyzed resumes.

Orchestrates input validation, document assembly and the persistence gateway,
and folds every outcome into a uniform result envelope. No exception escapes
the envelope-returning operations.
"""
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncEngine
import structlog

from roast_storage.core.config import Settings
from roast_storage.core.database import build_engine, build_session_factory
from roast_storage.core.exceptions import NotFoundError, ValidationError
from roast_storage.resumes.assembler import DocumentAssembler, generate_resume_id, unwrap_analysis
from roast_storage.resumes.gateway import PersistenceGateway
from roast_storage.resumes.heuristics import RegexTextHeuristics
from roast_storage.resumes.input_validator import InputValidator
from roast_storage.resumes.interfaces import ResumeAnalyzer, TextExtractor
from roast_storage.resumes.schemas import ResumeRecord, ResumeSummary, ScoreSummary

logger = structlog.get_logger()

VALIDATION_ERROR = "VALIDATION_ERROR"
STORAGE_ERROR = "STORAGE_ERROR"
NOT_FOUND = "NOT_FOUND"

# Document paths checked by the data quality report
QUALITY_FIELDS = {
    "missing_resume_id": ("resumeId",),
    "missing_personal_info": ("extractedInfo", "personalInfo"),
    "missing_score": ("analysis", "overallScore"),
    "missing_feedback": ("analysis", "feedback"),
    "missing_uploaded_at": ("timestamps", "uploadedAt"),
}


def _elapsed_ms(start_time: float) -> int:
    return int((time.perf_counter() - start_time) * 1000)


def _has_path(document: Any, path) -> bool:
    for key in path:
        if not isinstance(document, Mapping) or document.get(key) is None:
            return False
        document = document[key]
    return True


class ResumeStorageService:
    """Saves resume analyses and answers storage queries"""

    def __init__(
        self,
        settings: Settings,
        gateway: PersistenceGateway,
        validator: Optional[InputValidator] = None,
        assembler: Optional[DocumentAssembler] = None,
    ):
        self.settings = settings
        self.gateway = gateway
        self.validator = validator or InputValidator(min_text_length=settings.MIN_EXTRACTED_TEXT_LENGTH)
        if assembler is None:
            heuristics = RegexTextHeuristics(industry_keywords=settings.INDUSTRY_KEYWORDS)
            assembler = DocumentAssembler(
                personal_info_extractor=heuristics,
                analytics_estimator=heuristics,
                contact_validator=heuristics,
                user_agent_max_length=settings.USER_AGENT_MAX_LENGTH,
            )
        self.assembler = assembler

    async def save_resume_data(
        self,
        file: Any,
        extracted_text: Any,
        analysis_result: Any,
        preferences: Any,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Validate, assemble and persist one analyzed resume

        Returns:
            Envelope with ``success`` and either ``resume_id``/``message`` or
            ``error``/``code``/``details``, plus ``processing_time`` (ms) and
            ``request_id``

        Envelope keys are snake_case (``resume_id``, ``processing_time``)
        while the stored document keeps camelCase (``resumeId``); callers
        exposing the camelCase contract map the keys at their boundary.
        """
        start_time = time.perf_counter()
        metadata = metadata if isinstance(metadata, Mapping) else {}
        request_id = metadata.get("requestId") or str(uuid.uuid4())

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            logger.info(
                "resume_save_started",
                file_name=file.get("originalname") if isinstance(file, Mapping) else None,
                file_size=file.get("size") if isinstance(file, Mapping) else None,
                has_analysis=bool(analysis_result),
                has_preferences=bool(preferences),
            )

            validation = self.validator.validate(file, extracted_text, analysis_result, preferences)
            if not validation.valid:
                logger.warning("resume_input_invalid", errors=validation.errors)
                return {
                    "success": False,
                    "error": "Invalid input data",
                    "code": VALIDATION_ERROR,
                    "details": validation.errors,
                    "processing_time": _elapsed_ms(start_time),
                    "request_id": request_id,
                }

            try:
                resume_id = generate_resume_id()
                document = self.assembler.assemble(
                    resume_id,
                    file,
                    extracted_text,
                    analysis_result,
                    preferences,
                    metadata,
                    request_id,
                )
                saved = await self.gateway.save(document)
            except Exception as e:
                processing_time = _elapsed_ms(start_time)
                logger.exception(
                    "resume_save_failed",
                    error=str(e),
                    processing_time=processing_time,
                    file_name=file.get("originalname"),
                )
                return self._failure(
                    "Failed to save resume data", STORAGE_ERROR, e, processing_time, request_id
                )

            processing_time = _elapsed_ms(start_time)
            logger.info(
                "resume_saved",
                resume_id=saved.resume_id,
                processing_time=processing_time,
                score=unwrap_analysis(analysis_result).get("score"),
            )
            return {
                "success": True,
                "resume_id": saved.resume_id,
                "message": "Resume data saved successfully",
                "processing_time": processing_time,
                "request_id": request_id,
            }

    async def analyze_and_save(
        self,
        file: Mapping[str, Any],
        preferences: Mapping[str, Any],
        extractor: TextExtractor,
        analyzer: ResumeAnalyzer,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Extract, analyze and store an upload in one call

        ExtractionError from the extractor is not recovered here; it
        propagates to the caller before anything is stored.
        """
        extracted_text = extractor.extract_text_from_file(file)
        analysis_result = await analyzer.analyze_resume(
            extracted_text, preferences, file.get("originalname")
        )
        return await self.save_resume_data(file, extracted_text, analysis_result, preferences, metadata)

    async def get_storage_stats(self) -> Dict[str, Any]:
        """
        Total and recent record counts; never raises

        Keys are snake_case: ``total_resumes`` and ``recent_resumes``
        correspond to totalResumes / recentResumes.
        """
        try:
            since = datetime.now(timezone.utc) - timedelta(hours=self.settings.RECENT_WINDOW_HOURS)
            total_resumes = await self.gateway.count()
            recent_resumes = await self.gateway.count(since=since)
            return {
                "total_resumes": total_resumes,
                "recent_resumes": recent_resumes,
                "status": "healthy",
            }
        except Exception as e:
            logger.error("storage_stats_failed", error=str(e))
            return {"status": "error", "error": str(e)}

    async def get_resume(self, resume_id: str) -> Optional[ResumeRecord]:
        return await self.gateway.get(resume_id)

    async def list_resumes(self, limit: int = 50, offset: int = 0) -> List[ResumeSummary]:
        return await self.gateway.list_summaries(limit=limit, offset=offset)

    async def get_score_summary(self) -> ScoreSummary:
        return await self.gateway.score_summary()

    async def update_resume(self, resume_id: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
        """Apply a partial update; resumeId cannot change"""
        start_time = time.perf_counter()
        try:
            await self.gateway.update(resume_id, changes)
        except NotFoundError as e:
            return self._failure("Resume not found", NOT_FOUND, e, _elapsed_ms(start_time))
        except ValidationError as e:
            return self._failure(
                "Invalid resume update", VALIDATION_ERROR, e, _elapsed_ms(start_time), details=e.errors
            )
        except Exception as e:
            logger.exception("resume_update_failed", resume_id=resume_id, error=str(e))
            return self._failure("Failed to update resume data", STORAGE_ERROR, e, _elapsed_ms(start_time))

        return {
            "success": True,
            "resume_id": resume_id,
            "message": "Resume data updated successfully",
            "processing_time": _elapsed_ms(start_time),
        }

    async def delete_resume(self, resume_id: str) -> Dict[str, Any]:
        """Administrative delete of one record"""
        start_time = time.perf_counter()
        try:
            deleted = await self.gateway.delete(resume_id)
        except Exception as e:
            logger.exception("resume_delete_failed", resume_id=resume_id, error=str(e))
            return self._failure("Failed to delete resume data", STORAGE_ERROR, e, _elapsed_ms(start_time))

        if not deleted:
            return self._failure(
                "Resume not found", NOT_FOUND, NotFoundError("Resume", resume_id), _elapsed_ms(start_time)
            )
        return {
            "success": True,
            "resume_id": resume_id,
            "message": "Resume data deleted successfully",
            "processing_time": _elapsed_ms(start_time),
        }

    async def purge_expired(self, retention_days: Optional[int] = None) -> int:
        """Delete records older than the retention window"""
        days = retention_days if retention_days is not None else self.settings.DATA_RETENTION_DAYS
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        return await self.gateway.purge_uploaded_before(cutoff)

    async def get_data_quality_report(self) -> Dict[str, int]:
        """Count stored documents missing key fields"""
        report = {"total": 0}
        report.update({issue: 0 for issue in QUALITY_FIELDS})
        async for document in self.gateway.iter_documents():
            report["total"] += 1
            for issue, path in QUALITY_FIELDS.items():
                if not _has_path(document, path):
                    report[issue] += 1
        return report

    def _failure(
        self,
        error: str,
        code: str,
        exc: Exception,
        processing_time: int,
        request_id: Optional[str] = None,
        details: Any = None,
    ) -> Dict[str, Any]:
        envelope: Dict[str, Any] = {
            "success": False,
            "error": error,
            "code": code,
            "processing_time": processing_time,
        }
        # Internal error text stays out of production responses
        if not self.settings.is_production:
            envelope["details"] = details if details is not None else str(exc)
        if request_id is not None:
            envelope["request_id"] = request_id
        return envelope


def build_storage_service(settings: Settings, engine: Optional[AsyncEngine] = None) -> ResumeStorageService:
    """Wire engine, session factory, gateway and service from settings"""
    engine = engine or build_engine(settings)
    gateway = PersistenceGateway(
        build_session_factory(engine),
        max_retries=settings.STORAGE_MAX_RETRIES,
        backoff_seconds=settings.STORAGE_RETRY_BACKOFF_SECONDS,
    )
    return ResumeStorageService(settings, gateway)
