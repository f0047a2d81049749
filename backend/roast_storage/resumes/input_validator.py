"""
Input validation for resume save requests
"""
from dataclasses import dataclass, field
from numbers import Number
from typing import Any, List, Mapping

import structlog

logger = structlog.get_logger()

REQUIRED_ANALYSIS_FIELDS = ("score", "roastFeedback")


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool) and value > 0


class InputValidator:
    """Checks the four save inputs and collects every violation"""

    def __init__(self, min_text_length: int = 10):
        self.min_text_length = min_text_length

    def validate(
        self,
        file: Any,
        extracted_text: Any,
        analysis_result: Any,
        preferences: Any,
    ) -> ValidationResult:
        """
        Validate save inputs without raising

        Returns:
            ValidationResult with all violated rules, not just the first
        """
        errors: List[str] = []
        errors.extend(self._validate_file(file))
        errors.extend(self._validate_text(extracted_text))
        errors.extend(self._validate_analysis(analysis_result))
        errors.extend(self._validate_preferences(preferences))

        if errors:
            logger.debug("input_validation_failed", error_count=len(errors))
        return ValidationResult(valid=not errors, errors=errors)

    def _validate_file(self, file: Any) -> List[str]:
        if not isinstance(file, Mapping):
            return ["Invalid file object"]

        errors = []
        if not _is_non_empty_string(file.get("originalname")):
            errors.append("Missing or invalid file name")
        if not _is_positive_number(file.get("size")):
            errors.append("Missing or invalid file size")
        if not _is_non_empty_string(file.get("mimetype")):
            errors.append("Missing or invalid file mime type")
        return errors

    def _validate_text(self, extracted_text: Any) -> List[str]:
        if not isinstance(extracted_text, str) or len(extracted_text.strip()) < self.min_text_length:
            return ["Invalid or insufficient extracted text"]
        return []

    def _validate_analysis(self, analysis_result: Any) -> List[str]:
        if not isinstance(analysis_result, Mapping):
            return ["Missing analysis result"]

        wrapped = analysis_result.get("data")
        errors = []
        for field_name in REQUIRED_ANALYSIS_FIELDS:
            in_payload = field_name in analysis_result and analysis_result[field_name] is not None
            in_wrapped = (
                isinstance(wrapped, Mapping)
                and field_name in wrapped
                and wrapped[field_name] is not None
            )
            if not (in_payload or in_wrapped):
                errors.append(f"Missing analysis field: {field_name}")
        return errors

    def _validate_preferences(self, preferences: Any) -> List[str]:
        if not isinstance(preferences, Mapping):
            return ["Missing preferences"]

        errors = []
        if not preferences.get("roastLevel"):
            errors.append("Missing roast level preference")
        if not preferences.get("language"):
            errors.append("Missing language preference")
        return errors
