"""
Tests for the storage facade and its result envelopes
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from roast_storage.core.config import Settings
from roast_storage.core.exceptions import ExtractionError
from roast_storage.models.resume import ResumeDocument
from roast_storage.resumes.storage_service import (
    NOT_FOUND,
    STORAGE_ERROR,
    VALIDATION_ERROR,
    ResumeStorageService,
)


def locked_database():
    return OperationalError("INSERT INTO resume_documents", {}, Exception("database is locked"))


class FakeExtractor:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error

    def extract_text_from_file(self, file):
        if self.error:
            raise self.error
        return self.text


class FakeAnalyzer:
    def __init__(self, result):
        self.result = result
        self.calls = []

    async def analyze_resume(self, text, preferences, file_name=None):
        self.calls.append((text, preferences, file_name))
        return self.result


class TestSaveResumeData:

    @pytest.mark.asyncio
    async def test_happy_path(self, storage_service, sample_file, sample_text, sample_analysis, sample_preferences):
        result = await storage_service.save_resume_data(
            sample_file, sample_text, sample_analysis, sample_preferences
        )

        assert result["success"] is True
        assert result["resume_id"].startswith("resume-")
        assert result["message"] == "Resume data saved successfully"
        assert result["processing_time"] >= 0

        record = await storage_service.get_resume(result["resume_id"])
        assert record.analysis.overall_score == 75
        assert record.analysis.feedback == "Test feedback"
        assert record.extracted_info.personal_info.name == "John Doe"
        assert record.preferences.roast_level == "professional"
        assert record.preferences.language == "english"
        assert record.metadata.request_id == result["request_id"]

    @pytest.mark.asyncio
    async def test_generated_request_id(self, storage_service, sample_file, sample_text, sample_analysis, sample_preferences):
        result = await storage_service.save_resume_data(
            sample_file, sample_text, sample_analysis, sample_preferences
        )
        assert uuid.UUID(result["request_id"])

    @pytest.mark.asyncio
    async def test_request_id_passthrough(self, storage_service, sample_file, sample_text, sample_analysis, sample_preferences):
        result = await storage_service.save_resume_data(
            sample_file, sample_text, sample_analysis, sample_preferences,
            {"requestId": "req-42", "clientIP": "203.0.113.7"},
        )
        assert result["request_id"] == "req-42"

        record = await storage_service.get_resume(result["resume_id"])
        assert record.metadata.request_id == "req-42"
        assert record.metadata.client_ip == "203.0.113.7"

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, storage_service, sample_file, sample_text, sample_analysis, sample_preferences):
        first = await storage_service.save_resume_data(sample_file, sample_text, sample_analysis, sample_preferences)
        second = await storage_service.save_resume_data(sample_file, sample_text, sample_analysis, sample_preferences)
        assert first["resume_id"] != second["resume_id"]
        assert (await storage_service.get_storage_stats())["total_resumes"] == 2

    @pytest.mark.asyncio
    async def test_invalid_input_stores_nothing(self, storage_service, sample_file, sample_text, sample_analysis):
        result = await storage_service.save_resume_data(
            sample_file, sample_text, sample_analysis, {"language": "english"}
        )

        assert result["success"] is False
        assert result["error"] == "Invalid input data"
        assert result["code"] == VALIDATION_ERROR
        assert "Missing roast level preference" in result["details"]
        assert "resume_id" not in result
        assert await storage_service.gateway.count() == 0

    @pytest.mark.asyncio
    async def test_every_input_error_reported(self, storage_service):
        result = await storage_service.save_resume_data(None, "", None, None)
        assert result["code"] == VALIDATION_ERROR
        assert len(result["details"]) == 4

    @pytest.mark.asyncio
    async def test_wrapped_payload_without_inner_score(self, storage_service, sample_file, sample_text, sample_preferences):
        # validation sees the top-level score, assembly reads only the wrapped payload
        analysis = {"score": 60, "data": {"roastFeedback": "Too long"}}
        result = await storage_service.save_resume_data(sample_file, sample_text, analysis, sample_preferences)

        assert result["success"] is True
        record = await storage_service.get_resume(result["resume_id"])
        assert record.analysis.overall_score == 0
        assert record.analysis.feedback == "Too long"

    @pytest.mark.asyncio
    async def test_transient_failure_is_invisible(
        self, storage_service, sample_file, sample_text, sample_analysis, sample_preferences, monkeypatch
    ):
        gateway = storage_service.gateway
        real_insert = gateway._insert
        failures = [locked_database()]

        async def flaky_insert(record):
            if failures:
                raise failures.pop()
            await real_insert(record)

        monkeypatch.setattr(gateway, "_insert", flaky_insert)
        result = await storage_service.save_resume_data(
            sample_file, sample_text, sample_analysis, sample_preferences
        )

        assert result["success"] is True
        assert await gateway.count() == 1

    @pytest.mark.asyncio
    async def test_storage_failure_envelope(self, storage_service, sample_file, sample_text, sample_analysis, sample_preferences):
        with patch.object(storage_service.gateway, "_insert", new_callable=AsyncMock, side_effect=locked_database()):
            result = await storage_service.save_resume_data(
                sample_file, sample_text, sample_analysis, sample_preferences, {"requestId": "req-fail"}
            )

        assert result["success"] is False
        assert result["error"] == "Failed to save resume data"
        assert result["code"] == STORAGE_ERROR
        assert "database is locked" in result["details"]
        assert result["request_id"] == "req-fail"

    @pytest.mark.asyncio
    async def test_production_hides_details(self, gateway, sample_file, sample_text, sample_analysis, sample_preferences):
        production = Settings(
            _env_file=None,
            DATABASE_URL="sqlite+aiosqlite:///:memory:",
            ENVIRONMENT="production",
        )
        service = ResumeStorageService(production, gateway)
        with patch.object(gateway, "_insert", new_callable=AsyncMock, side_effect=locked_database()):
            result = await service.save_resume_data(sample_file, sample_text, sample_analysis, sample_preferences)

        assert result["code"] == STORAGE_ERROR
        assert "details" not in result

    @pytest.mark.asyncio
    async def test_schema_violation_reported_as_storage_error(
        self, storage_service, sample_file, sample_text, sample_preferences
    ):
        result = await storage_service.save_resume_data(
            sample_file, sample_text, {"score": 150, "roastFeedback": "Too kind"}, sample_preferences
        )
        assert result["success"] is False
        assert result["code"] == STORAGE_ERROR
        assert "overallScore" in result["details"]
        assert await storage_service.gateway.count() == 0


class TestAnalyzeAndSave:

    @pytest.mark.asyncio
    async def test_extract_analyze_store(self, storage_service, sample_file, sample_preferences):
        analyzer = FakeAnalyzer({"data": {"score": 55, "roastFeedback": "Bland"}})
        # score only inside the wrapper satisfies validation
        result = await storage_service.analyze_and_save(
            sample_file, sample_preferences, FakeExtractor("Jane Roe\nData Engineer"), analyzer
        )

        assert result["success"] is True
        assert analyzer.calls == [("Jane Roe\nData Engineer", sample_preferences, "test.txt")]
        record = await storage_service.get_resume(result["resume_id"])
        assert record.analysis.overall_score == 55

    @pytest.mark.asyncio
    async def test_extraction_error_propagates(self, storage_service, sample_file, sample_preferences):
        extractor = FakeExtractor(error=ExtractionError("Unsupported file type: image/png"))
        analyzer = FakeAnalyzer({"score": 1, "roastFeedback": "x"})

        with pytest.raises(ExtractionError):
            await storage_service.analyze_and_save(sample_file, sample_preferences, extractor, analyzer)
        assert analyzer.calls == []
        assert await storage_service.gateway.count() == 0


class TestStorageStats:

    @pytest.mark.asyncio
    async def test_healthy(self, storage_service, make_document, utc):
        await storage_service.gateway.save(make_document("resume-old", uploaded_at=utc(2020, 1, 1)))
        await storage_service.gateway.save(make_document("resume-new"))

        stats = await storage_service.get_storage_stats()
        assert stats == {"total_resumes": 2, "recent_resumes": 1, "status": "healthy"}

    @pytest.mark.asyncio
    async def test_empty(self, storage_service):
        stats = await storage_service.get_storage_stats()
        assert stats == {"total_resumes": 0, "recent_resumes": 0, "status": "healthy"}

    @pytest.mark.asyncio
    async def test_backend_failure(self, storage_service):
        with patch.object(storage_service.gateway, "count", new_callable=AsyncMock, side_effect=RuntimeError("db down")):
            stats = await storage_service.get_storage_stats()
        assert stats == {"status": "error", "error": "db down"}


class TestMaintenance:

    @pytest.mark.asyncio
    async def test_update_resume(self, storage_service, make_document):
        await storage_service.gateway.save(make_document())
        result = await storage_service.update_resume("resume-test-0001", {"analysis": {"overallScore": 42}})

        assert result["success"] is True
        record = await storage_service.get_resume("resume-test-0001")
        assert record.analysis.overall_score == 42

    @pytest.mark.asyncio
    async def test_update_unknown(self, storage_service):
        result = await storage_service.update_resume("resume-missing", {"analysis": {"overallScore": 42}})
        assert result["success"] is False
        assert result["code"] == NOT_FOUND

    @pytest.mark.asyncio
    async def test_update_invalid(self, storage_service, make_document):
        await storage_service.gateway.save(make_document())

        result = await storage_service.update_resume("resume-test-0001", {"resumeId": "resume-renamed"})
        assert result["code"] == VALIDATION_ERROR
        assert result["details"] == ["resumeId: immutable"]

        result = await storage_service.update_resume("resume-test-0001", {"analysis": {"overallScore": 101}})
        assert result["code"] == VALIDATION_ERROR

    @pytest.mark.asyncio
    async def test_delete_resume(self, storage_service, make_document):
        await storage_service.gateway.save(make_document())

        assert (await storage_service.delete_resume("resume-test-0001"))["success"] is True
        result = await storage_service.delete_resume("resume-test-0001")
        assert result["success"] is False
        assert result["code"] == NOT_FOUND

    @pytest.mark.asyncio
    async def test_purge_expired(self, storage_service, make_document, utc):
        await storage_service.gateway.save(make_document("resume-old", uploaded_at=utc(2020, 1, 1)))
        await storage_service.gateway.save(make_document("resume-new"))

        assert await storage_service.purge_expired(retention_days=30) == 1
        assert await storage_service.gateway.count() == 1

    @pytest.mark.asyncio
    async def test_listing_and_scores(self, storage_service, make_document, utc):
        await storage_service.gateway.save(make_document("resume-1", score=60, uploaded_at=utc(2024, 1, 1)))
        await storage_service.gateway.save(make_document("resume-2", score=90, uploaded_at=utc(2024, 2, 1)))

        summaries = await storage_service.list_resumes(limit=10)
        assert [s.resume_id for s in summaries] == ["resume-2", "resume-1"]

        scores = await storage_service.get_score_summary()
        assert (scores.count, scores.average, scores.min, scores.max) == (2, 75.0, 60, 90)

    @pytest.mark.asyncio
    async def test_data_quality_report(self, storage_service, session_factory, make_document, utc):
        await storage_service.gateway.save(make_document())
        async with session_factory() as session:
            session.add(ResumeDocument(
                resume_id="legacy-1",
                original_file_name="old.pdf",
                overall_score=0,
                uploaded_at=utc(2020, 1, 1),
                updated_at=utc(2020, 1, 1),
                document={"resumeId": "legacy-1", "score": 40},
            ))
            await session.commit()

        report = await storage_service.get_data_quality_report()
        assert report == {
            "total": 2,
            "missing_resume_id": 0,
            "missing_personal_info": 1,
            "missing_score": 1,
            "missing_feedback": 1,
            "missing_uploaded_at": 1,
        }


class TestSchemaAgreesWithValidator:

    @pytest.mark.asyncio
    async def test_fractional_file_size(self, storage_service, sample_text, sample_analysis, sample_preferences):
        file = {"originalname": "cv.pdf", "size": 12.5, "mimetype": "application/pdf"}
        assert storage_service.validator.validate(file, sample_text, sample_analysis, sample_preferences).valid

        result = await storage_service.save_resume_data(file, sample_text, sample_analysis, sample_preferences)

        assert result["success"] is True
        record = await storage_service.get_resume(result["resume_id"])
        assert record.file_info.file_size == 12.5

    @pytest.mark.asyncio
    async def test_null_contact_flags(self, storage_service, sample_file, sample_text, sample_preferences):
        analysis = {
            "score": 70,
            "roastFeedback": "ok",
            "contactValidation": {
                "hasEmail": True,
                "hasPhone": None,
                "hasAddress": None,
                "emailValid": True,
                "phoneValid": None,
            },
        }
        result = await storage_service.save_resume_data(sample_file, sample_text, analysis, sample_preferences)

        assert result["success"] is True
        contact = (await storage_service.get_resume(result["resume_id"])).analysis.contact_validation
        assert contact.has_email is True
        assert contact.has_phone is False
        assert contact.has_address is False
        assert contact.phone_valid is False

    @pytest.mark.asyncio
    async def test_user_agent_limit_follows_settings(
        self, gateway, sample_file, sample_text, sample_analysis, sample_preferences
    ):
        settings = Settings(
            _env_file=None,
            DATABASE_URL="sqlite+aiosqlite:///:memory:",
            USER_AGENT_MAX_LENGTH=300,
        )
        service = ResumeStorageService(settings, gateway)
        result = await service.save_resume_data(
            sample_file, sample_text, sample_analysis, sample_preferences, {"userAgent": "a" * 250}
        )

        assert result["success"] is True
        record = await service.get_resume(result["resume_id"])
        assert record.metadata.user_agent == "a" * 250
