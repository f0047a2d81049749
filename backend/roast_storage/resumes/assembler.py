"""
Document assembly - merges the AI analysis payload with heuristic fallbacks
into one canonical resume record.

The AI payload arrives either flat or wrapped under a ``data`` key; both are
accepted and resolved once, up front. Assembly never raises: every field has
a deterministic default, so even minimal input yields a complete document.
"""
import hashlib
import re
import secrets
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from roast_storage.resumes.heuristics import (
    AnalyticsEstimator,
    ContactValidator,
    PersonalInfoExtractor,
    text_heuristics,
)

UPLOAD_PREFIX_PATTERN = re.compile(r'^\d+_')

SKILL_CATEGORIES = ("technical", "soft", "languages", "tools", "frameworks")
LIST_SECTIONS = (
    "experience", "education", "certifications", "projects",
    "awards", "volunteerWork", "interests",
)

DEFAULT_FEEDBACK = "No feedback available"
DEFAULT_ROAST_TYPE = "constructive"
DEFAULT_GENDER = "not-specified"
UNKNOWN = "unknown"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_resume_id() -> str:
    """resume-<base36 epoch millis>-<16 hex chars>"""
    timestamp = _to_base36(int(time.time() * 1000))
    return f"resume-{timestamp}-{secrets.token_hex(8)}"


def unwrap_analysis(analysis_result: Any) -> Mapping[str, Any]:
    """Resolve the flat / ``data``-wrapped payload shapes"""
    if not isinstance(analysis_result, Mapping):
        return {}
    wrapped = analysis_result.get("data")
    if isinstance(wrapped, Mapping):
        return wrapped
    return analysis_result


def strip_upload_prefix(file_name: str) -> str:
    """Undo the ``<digits>_`` prefix added at upload time"""
    return UPLOAD_PREFIX_PATTERN.sub("", file_name or "")


def compute_file_hash(file: Mapping[str, Any], extracted_text: str) -> str:
    """MD5 of the raw upload, or of the extracted text when bytes are absent"""
    content = file.get("buffer")
    if not isinstance(content, (bytes, bytearray)) or not content:
        content = (extracted_text or "").encode("utf-8")
    return hashlib.md5(content).hexdigest()


def _truncate(value: Any, limit: int) -> str:
    return str(value)[:limit]


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def normalize_skills(skills: Any) -> Dict[str, List[Any]]:
    """Skills as the five categories; a flat list is filed under technical"""
    normalized: Dict[str, List[Any]] = {category: [] for category in SKILL_CATEGORIES}
    if isinstance(skills, Mapping):
        for category in SKILL_CATEGORIES:
            values = skills.get(category)
            if isinstance(values, (list, tuple)):
                normalized[category] = list(values)
    elif isinstance(skills, (list, tuple)):
        normalized["technical"] = list(skills)
    return normalized


class DocumentAssembler:
    """Builds ResumeRecord-shaped documents from heterogeneous inputs"""

    def __init__(
        self,
        personal_info_extractor: Optional[PersonalInfoExtractor] = None,
        analytics_estimator: Optional[AnalyticsEstimator] = None,
        contact_validator: Optional[ContactValidator] = None,
        user_agent_max_length: int = 200,
    ):
        self.personal_info_extractor = personal_info_extractor or text_heuristics
        self.analytics_estimator = analytics_estimator or text_heuristics
        self.contact_validator = contact_validator or text_heuristics
        self.user_agent_max_length = user_agent_max_length

    def assemble(
        self,
        resume_id: str,
        file: Mapping[str, Any],
        extracted_text: str,
        analysis_result: Mapping[str, Any],
        preferences: Mapping[str, Any],
        metadata: Optional[Mapping[str, Any]] = None,
        request_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Canonical camelCase resume document"""
        analysis = unwrap_analysis(analysis_result)
        metadata = metadata or {}
        now = datetime.now(timezone.utc)
        file_name = strip_upload_prefix(file.get("originalname", ""))

        return {
            "resumeId": resume_id,
            "fileInfo": {
                "fileName": file_name,
                "originalFileName": file_name,
                "fileSize": file.get("size"),
                "mimeType": file.get("mimetype"),
                "fileHash": compute_file_hash(file, extracted_text),
            },
            "extractedInfo": self._build_extracted_info(analysis, extracted_text),
            "analysis": self._build_analysis(analysis, extracted_text),
            "preferences": {
                "roastLevel": preferences.get("roastLevel"),
                "language": preferences.get("language"),
                "roastType": preferences.get("roastType") or DEFAULT_ROAST_TYPE,
                "gender": preferences.get("gender") or DEFAULT_GENDER,
            },
            "timestamps": {
                "uploadedAt": now,
                "analyzedAt": now,
                "updatedAt": now,
            },
            "metadata": {
                "clientIP": metadata.get("clientIP") or preferences.get("clientIP") or UNKNOWN,
                "userAgent": _truncate(
                    metadata.get("userAgent") or preferences.get("userAgent") or UNKNOWN,
                    self.user_agent_max_length,
                ),
                "countryCode": metadata.get("countryCode") or UNKNOWN,
                "gdprConsent": metadata.get("gdprConsent") is not False,
                "requestId": request_id,
                "processingTime": 0,
            },
        }

    def _build_extracted_info(self, analysis: Mapping[str, Any], extracted_text: str) -> Dict[str, Any]:
        supplied = analysis.get("extractedInfo")
        if not isinstance(supplied, Mapping):
            supplied = {}

        personal_info = supplied.get("personalInfo")
        if not personal_info:
            personal_info = self.personal_info_extractor.extract_basic_personal_info(extracted_text)

        extracted_info: Dict[str, Any] = {
            "personalInfo": personal_info,
            "professionalSummary": supplied.get("professionalSummary") or None,
            "skills": normalize_skills(supplied.get("skills")),
            "references": supplied.get("references") or None,
        }
        for section in LIST_SECTIONS:
            extracted_info[section] = _as_list(supplied.get(section))
        return extracted_info

    def _build_analysis(self, analysis: Mapping[str, Any], extracted_text: str) -> Dict[str, Any]:
        score = analysis.get("score")
        return {
            "overallScore": score if score is not None else 0,
            "feedback": analysis.get("roastFeedback") or DEFAULT_FEEDBACK,
            "strengths": _as_list(analysis.get("strengths")),
            "weaknesses": _as_list(analysis.get("weaknesses")),
            "improvements": _as_list(analysis.get("improvements")),
            "resumeAnalytics": (
                analysis.get("resumeAnalytics")
                or self.analytics_estimator.generate_basic_analytics(extracted_text)
            ),
            "contactValidation": (
                analysis.get("contactValidation")
                or self.contact_validator.validate_contact_info(extracted_text)
            ),
        }
