"""
Legacy document migration

Older resume documents were stored flat (top-level ``score``, ``roastFeedback``,
``name``, ``email``, ``skills`` and so on, with file details under
``metadata``). These helpers map them onto the canonical record shape.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from roast_storage.resumes.assembler import (
    DEFAULT_FEEDBACK,
    LIST_SECTIONS,
    generate_resume_id,
    normalize_skills,
    strip_upload_prefix,
)

LEGACY_FILE_NAME = "unknown.pdf"
LEGACY_MIME_TYPE = "application/pdf"


def _get(document: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(document, Mapping):
            return None
        document = document.get(key)
    return document


def _first(*values: Any) -> Any:
    for value in values:
        if value not in (None, "", [], {}):
            return value
    return None


def needs_migration(document: Mapping[str, Any]) -> bool:
    """True when a document lacks any of the canonical top-level anchors"""
    return (
        not document.get("resumeId")
        or not isinstance(document.get("fileInfo"), Mapping)
        or _get(document, "extractedInfo", "personalInfo") is None
        or _get(document, "analysis", "overallScore") is None
    )


def _legacy_skills(doc: Mapping[str, Any]) -> Dict[str, Any]:
    skills = _first(_get(doc, "extractedInfo", "skills"), doc.get("skills"))
    if isinstance(skills, Mapping) or isinstance(skills, list):
        normalized = normalize_skills(skills)
    else:
        normalized = normalize_skills(None)

    fallbacks = {
        "technical": doc.get("technicalSkills"),
        "soft": doc.get("softSkills"),
        "languages": doc.get("languages"),
        "tools": doc.get("tools"),
        "frameworks": doc.get("frameworks"),
    }
    for category, value in fallbacks.items():
        if not normalized[category] and isinstance(value, list):
            normalized[category] = list(value)
    return normalized


def _legacy_uploaded_at(doc: Mapping[str, Any], now: datetime) -> Any:
    return _first(
        _get(doc, "timestamps", "uploadedAt"),
        _get(doc, "metadata", "uploadDate"),
        doc.get("uploadedAt"),
        now,
    )


def normalize_legacy_document(doc: Mapping[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Canonical camelCase document built from a legacy flat document"""
    now = now or datetime.now(timezone.utc)
    extracted = doc.get("extractedInfo") if isinstance(doc.get("extractedInfo"), Mapping) else {}
    legacy_meta = doc.get("metadata") if isinstance(doc.get("metadata"), Mapping) else {}
    preferences = doc.get("preferences") if isinstance(doc.get("preferences"), Mapping) else {}

    file_name = strip_upload_prefix(
        _first(
            _get(doc, "fileInfo", "originalFileName"),
            legacy_meta.get("originalFileName"),
            doc.get("originalFileName"),
            doc.get("fileName"),
            LEGACY_FILE_NAME,
        )
    )

    personal_info = _get(extracted, "personalInfo")
    if not isinstance(personal_info, Mapping):
        personal_info = {
            "name": _first(extracted.get("name"), doc.get("name")),
            "email": _first(extracted.get("email"), doc.get("email")),
            "phone": _first(extracted.get("phone"), doc.get("phone")),
            "address": {
                "full": _first(extracted.get("address"), doc.get("address")),
                "city": extracted.get("city"),
                "state": extracted.get("state"),
                "country": extracted.get("country"),
                "zipCode": extracted.get("zipCode"),
            },
            "socialProfiles": {
                "linkedin": _first(extracted.get("linkedIn"), doc.get("linkedIn")),
                "github": _first(extracted.get("github"), doc.get("github")),
                "portfolio": _first(extracted.get("portfolio"), doc.get("portfolio")),
                "website": extracted.get("website"),
                "twitter": extracted.get("twitter"),
            },
        }

    extracted_info: Dict[str, Any] = {
        "personalInfo": personal_info,
        "professionalSummary": _first(extracted.get("professionalSummary"), doc.get("professionalSummary")),
        "skills": _legacy_skills(doc),
        "references": _first(extracted.get("references"), doc.get("references")),
    }
    for section in LIST_SECTIONS:
        value = _first(extracted.get(section), doc.get(section))
        extracted_info[section] = list(value) if isinstance(value, list) else []

    analysis = doc.get("analysis") if isinstance(doc.get("analysis"), Mapping) else {}
    score = _first(analysis.get("overallScore"), doc.get("score"))
    feedback = analysis.get("feedback")
    if isinstance(feedback, Mapping):
        feedback = feedback.get("roastFeedback")

    return {
        "resumeId": doc.get("resumeId") or generate_resume_id(),
        "fileInfo": {
            "fileName": file_name,
            "originalFileName": file_name,
            "fileSize": _first(
                _get(doc, "fileInfo", "fileSize"), legacy_meta.get("fileSize"), doc.get("fileSize")
            ) or 0,
            "mimeType": _first(
                _get(doc, "fileInfo", "mimeType"),
                legacy_meta.get("fileType"),
                doc.get("mimeType"),
                LEGACY_MIME_TYPE,
            ),
            "fileHash": _first(_get(doc, "fileInfo", "fileHash"), doc.get("fileHash"), "unknown"),
        },
        "extractedInfo": extracted_info,
        "analysis": {
            "overallScore": score if score is not None else 0,
            "feedback": _first(feedback, doc.get("roastFeedback"), DEFAULT_FEEDBACK),
            "strengths": list(_first(analysis.get("strengths"), doc.get("strengths")) or []),
            "weaknesses": list(_first(analysis.get("weaknesses"), doc.get("weaknesses")) or []),
            "improvements": list(_first(analysis.get("improvements"), doc.get("improvements")) or []),
            "resumeAnalytics": _first(analysis.get("resumeAnalytics"), doc.get("resumeAnalytics")) or {},
            "contactValidation": _first(analysis.get("contactValidation"), doc.get("contactValidation")) or {},
        },
        "preferences": {
            "roastLevel": _first(preferences.get("roastLevel"), doc.get("roastLevel"), "professional"),
            "language": _first(preferences.get("language"), doc.get("language"), "english"),
            "roastType": _first(preferences.get("roastType"), doc.get("roastType"), "constructive"),
            "gender": _first(preferences.get("gender"), doc.get("gender"), "not-specified"),
        },
        "timestamps": {
            "uploadedAt": _legacy_uploaded_at(doc, now),
            "analyzedAt": _first(_get(doc, "timestamps", "analyzedAt"), now),
            "updatedAt": now,
        },
        "metadata": {
            "clientIP": _first(legacy_meta.get("clientIP"), "unknown"),
            "userAgent": str(_first(legacy_meta.get("userAgent"), "unknown"))[:200],
            "countryCode": _first(legacy_meta.get("countryCode"), "unknown"),
            "gdprConsent": legacy_meta.get("gdprConsent") is not False,
            "requestId": legacy_meta.get("requestId"),
            "processingTime": legacy_meta.get("processingTime") or 0,
        },
    }
