"""
Resume record Pydantic schemas

The persisted document uses camelCase keys; models accept either the alias or
the field name and dump by alias.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


def _unique(values: List[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        key = value.strip().lower()
        if key and key not in seen:
            seen.add(key)
            result.append(value.strip())
    return result


class RecordModel(BaseModel):
    """Base for every document section"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        coerce_numbers_to_str = True

    @field_validator("*", mode="before")
    @classmethod
    def null_lists(cls, value: Any, info: ValidationInfo) -> Any:
        field_info = cls.model_fields.get(info.field_name)
        if field_info is not None and getattr(field_info.annotation, "__origin__", None) is list:
            return _none_to_list(value)
        return value


class FileInfo(RecordModel):
    file_name: str
    original_file_name: str
    file_size: float = Field(ge=0)
    mime_type: str
    file_hash: str = "unknown"


class Address(RecordModel):
    full: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None


class SocialProfiles(RecordModel):
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None
    website: Optional[str] = None
    twitter: Optional[str] = None


class PersonalInfo(RecordModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Address = Field(default_factory=Address)
    social_profiles: SocialProfiles = Field(default_factory=SocialProfiles)

    @field_validator("address", "social_profiles", mode="before")
    @classmethod
    def null_sections(cls, value: Any) -> Any:
        return {} if value is None else value


class Skills(RecordModel):
    technical: List[str] = Field(default_factory=list)
    soft: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)
    frameworks: List[str] = Field(default_factory=list)

    @field_validator("technical", "soft", "languages", "tools", "frameworks", mode="after")
    @classmethod
    def ordered_set(cls, value: List[str]) -> List[str]:
        return _unique(value)


class Experience(RecordModel):
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    duration: Optional[str] = None
    description: Optional[str] = None
    achievements: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)


class Education(RecordModel):
    degree: Optional[str] = None
    field: Optional[str] = None
    institution: Optional[str] = None
    location: Optional[str] = None
    graduation_year: Optional[str] = None
    gpa: Optional[str] = None
    honors: List[str] = Field(default_factory=list)
    coursework: List[str] = Field(default_factory=list)


class Certification(RecordModel):
    name: Optional[str] = None
    issuer: Optional[str] = None
    date_obtained: Optional[str] = None
    expiration_date: Optional[str] = None
    credential_id: Optional[str] = None
    url: Optional[str] = None


class Project(RecordModel):
    name: Optional[str] = None
    description: Optional[str] = None
    role: Optional[str] = None
    duration: Optional[str] = None
    technologies: List[str] = Field(default_factory=list)
    achievements: List[str] = Field(default_factory=list)
    url: Optional[str] = None
    github: Optional[str] = None


class ExtractedInfo(RecordModel):
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    professional_summary: Optional[str] = None
    skills: Skills = Field(default_factory=Skills)
    experience: List[Experience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    awards: List[str] = Field(default_factory=list)
    volunteer_work: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    references: Optional[str] = None

    @field_validator("personal_info", "skills", mode="before")
    @classmethod
    def null_sections(cls, value: Any) -> Any:
        return {} if value is None else value


class Improvement(RecordModel):
    priority: Optional[Literal["low", "medium", "high"]] = None
    title: Optional[str] = None
    description: Optional[str] = None
    example: Optional[str] = None

    @field_validator("priority", mode="before")
    @classmethod
    def lowercase_priority(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class ResumeAnalytics(RecordModel):
    word_count: Optional[int] = None
    page_count: Optional[int] = None
    section_count: Optional[int] = None
    bullet_point_count: Optional[int] = None
    quantifiable_achievements: Optional[int] = None
    action_verbs_used: Optional[int] = None
    industry_keywords: List[str] = Field(default_factory=list)
    readability_score: Optional[float] = None
    ats_compatibility: Optional[str] = None
    missing_elements: List[str] = Field(default_factory=list)
    strong_elements: List[str] = Field(default_factory=list)


class ContactValidation(RecordModel):
    has_email: bool = False
    has_phone: bool = False
    has_linked_in: bool = False
    has_address: bool = False
    email_valid: bool = False
    phone_valid: bool = False
    linked_in_valid: bool = False

    @field_validator("*", mode="before")
    @classmethod
    def null_flags(cls, value: Any) -> Any:
        return False if value is None else value


class Analysis(RecordModel):
    overall_score: float = Field(ge=0, le=100)
    feedback: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    improvements: List[Improvement] = Field(default_factory=list)
    resume_analytics: ResumeAnalytics = Field(default_factory=ResumeAnalytics)
    contact_validation: ContactValidation = Field(default_factory=ContactValidation)

    @field_validator("resume_analytics", "contact_validation", mode="before")
    @classmethod
    def null_sections(cls, value: Any) -> Any:
        return {} if value is None else value


class Preferences(RecordModel):
    roast_level: str = Field(min_length=1)
    language: str = Field(min_length=1)
    roast_type: Optional[str] = None
    gender: Optional[str] = None


class Timestamps(RecordModel):
    uploaded_at: datetime
    analyzed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RequestMetadata(RecordModel):
    client_ip: Optional[str] = Field(default=None, alias="clientIP")
    user_agent: Optional[str] = None
    country_code: Optional[str] = None
    gdpr_consent: bool = True
    request_id: Optional[str] = None
    processing_time: int = 0


class ResumeRecord(RecordModel):
    """Canonical persisted resume document"""

    resume_id: str = Field(min_length=1)
    file_info: FileInfo
    extracted_info: ExtractedInfo = Field(default_factory=ExtractedInfo)
    analysis: Analysis
    preferences: Preferences
    timestamps: Timestamps
    metadata: RequestMetadata = Field(default_factory=RequestMetadata)

    def to_document(self) -> Dict[str, Any]:
        """JSON-safe camelCase document"""
        return self.model_dump(mode="json", by_alias=True)


class ResumeSummary(BaseModel):
    """Dashboard projection of a stored resume"""
    resume_id: str
    file_name: str
    overall_score: float
    uploaded_at: datetime
    candidate_name: Optional[str] = None


class ScoreSummary(BaseModel):
    """Aggregate view of overall scores"""
    count: int
    average: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
