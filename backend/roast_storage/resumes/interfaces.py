"""
Upstream collaborators of the storage service.

Text extraction and the AI analysis client live outside this package; these
protocols describe what callers are expected to hand over.
"""
from typing import Any, Mapping, Optional, Protocol


class TextExtractor(Protocol):
    """Raises ExtractionError for unsupported media types or unreadable files"""

    def extract_text_from_file(self, file: Mapping[str, Any]) -> str: ...


class ResumeAnalyzer(Protocol):
    """
    Returns ``{score, roastFeedback, strengths, weaknesses, improvements,
    extractedInfo?, resumeAnalytics?, contactValidation?}``, possibly wrapped
    under a ``data`` key.
    """

    async def analyze_resume(
        self,
        text: str,
        preferences: Mapping[str, Any],
        file_name: Optional[str] = None,
    ) -> Mapping[str, Any]: ...
