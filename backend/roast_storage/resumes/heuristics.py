"""
Regex heuristics for resume text.

Used only when the AI analysis leaves a field out: basic personal info,
document statistics and contact presence flags are derived straight from the
extracted text. Every function is pure and total - a missing match yields
None, 0 or an empty list, never an exception.
"""
import math
import re
from typing import Any, Dict, List, Optional, Protocol, Sequence


class PersonalInfoExtractor(Protocol):
    def extract_basic_personal_info(self, text: str) -> Dict[str, Any]: ...


class AnalyticsEstimator(Protocol):
    def generate_basic_analytics(self, text: str) -> Dict[str, Any]: ...


class ContactValidator(Protocol):
    def validate_contact_info(self, text: str) -> Dict[str, bool]: ...


EMAIL_PATTERN = re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b')

# [+CC ][(AAA) ]XXX-XXXX, separators: space, dot or dash
PHONE_PATTERN = re.compile(
    r'(?<![\d+])'
    r'(?:\+\d{1,3}[-.\s]?|\d{1,3}[-.\s])?'
    r'(?:\(\d{3}\)[-.\s]?|\d{3}[-.\s]?)?'
    r'\d{3}[-.\s]?\d{4}'
    r'(?!\d)'
)

LINKEDIN_PATTERN = re.compile(r'linkedin\.com/in/([a-zA-Z0-9-]+)', re.IGNORECASE)
ADDRESS_PATTERN = re.compile(
    r'\b(?:street|st|avenue|ave|road|rd|drive|dr|city|state|zip)\b', re.IGNORECASE
)

SECTION_SPLIT_PATTERN = re.compile(r'\n\s*\n')
BULLET_PATTERN = re.compile(r'[•·\-*]')
QUANTIFIABLE_PATTERN = re.compile(r'\d+%|\d+\+|\d+ [a-z]', re.IGNORECASE)

ACTION_VERBS = (
    'led', 'managed', 'developed', 'created', 'implemented',
    'improved', 'increased', 'decreased', 'achieved', 'delivered',
)
ACTION_VERB_PATTERN = re.compile(r'\b(?:' + '|'.join(ACTION_VERBS) + r')\b', re.IGNORECASE)

DEFAULT_INDUSTRY_KEYWORDS = (
    'javascript', 'python', 'react', 'node', 'aws', 'docker', 'mongodb', 'django',
)

WORDS_PER_PAGE = 250
MAX_NAME_LENGTH = 50


class RegexTextHeuristics:
    """Best-effort facts from unstructured resume text"""

    def __init__(self, industry_keywords: Optional[Sequence[str]] = None):
        keywords = industry_keywords if industry_keywords is not None else DEFAULT_INDUSTRY_KEYWORDS
        self.industry_keywords: List[str] = list(keywords)

    def extract_basic_personal_info(self, text: str) -> Dict[str, Any]:
        """Name, email, phone and LinkedIn profile from raw text"""
        text = text or ""
        email_match = EMAIL_PATTERN.search(text)
        phone_match = PHONE_PATTERN.search(text)
        linkedin_match = LINKEDIN_PATTERN.search(text)

        return {
            "name": self._guess_name(text),
            "email": email_match.group(0) if email_match else None,
            "phone": phone_match.group(0).strip() if phone_match else None,
            "address": {
                "full": None,
                "city": None,
                "state": None,
                "country": None,
                "zipCode": None,
            },
            "socialProfiles": {
                "linkedin": linkedin_match.group(0) if linkedin_match else None,
                "github": None,
                "portfolio": None,
                "website": None,
                "twitter": None,
            },
        }

    def generate_basic_analytics(self, text: str) -> Dict[str, Any]:
        """Word/page/section/bullet counts and keyword signals"""
        text = text or ""
        word_count = len(text.split())
        sections = [block for block in SECTION_SPLIT_PATTERN.split(text) if block.strip()]
        text_lower = text.lower()

        if word_count > 300:
            ats_compatibility = "High"
        elif word_count > 150:
            ats_compatibility = "Medium"
        else:
            ats_compatibility = "Low"

        return {
            "wordCount": word_count,
            "pageCount": max(1, math.ceil(word_count / WORDS_PER_PAGE)),
            "sectionCount": len(sections),
            "bulletPointCount": len(BULLET_PATTERN.findall(text)),
            "quantifiableAchievements": len(QUANTIFIABLE_PATTERN.findall(text)),
            "actionVerbsUsed": len(ACTION_VERB_PATTERN.findall(text)),
            "industryKeywords": [kw for kw in self.industry_keywords if kw.lower() in text_lower],
            "readabilityScore": min(100, max(30, 100 - word_count // 10)),
            "atsCompatibility": ats_compatibility,
            "missingElements": [],
            "strongElements": [],
        }

    def validate_contact_info(self, text: str) -> Dict[str, bool]:
        """Presence flags; validity equals presence on the fallback path"""
        text = text or ""
        has_email = EMAIL_PATTERN.search(text) is not None
        has_phone = PHONE_PATTERN.search(text) is not None
        has_linkedin = LINKEDIN_PATTERN.search(text) is not None
        has_address = ADDRESS_PATTERN.search(text) is not None

        return {
            "hasEmail": has_email,
            "hasPhone": has_phone,
            "hasLinkedIn": has_linkedin,
            "hasAddress": has_address,
            "emailValid": has_email,
            "phoneValid": has_phone,
            "linkedInValid": has_linkedin,
        }

    @staticmethod
    def _guess_name(text: str) -> Optional[str]:
        # Only the first non-empty line is considered
        lines = [line.strip() for line in text.split("\n") if line.strip()]
        if not lines:
            return None
        first = lines[0]
        if len(first) < MAX_NAME_LENGTH and "@" not in first:
            return first
        return None


text_heuristics = RegexTextHeuristics()

extract_basic_personal_info = text_heuristics.extract_basic_personal_info
generate_basic_analytics = text_heuristics.generate_basic_analytics
validate_contact_info = text_heuristics.validate_contact_info
