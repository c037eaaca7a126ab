"""
Resume document models for Resume RAG.

A resume is immutable once processed: the ingestion pipeline supplies the
raw text, its redacted variant, the structured extraction and the
embedding. The retrieval core only reads it, apart from analytics counters.
"""

import re
from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from resume_rag.utils.constants import ProcessingStatus

from .base import BaseDocument, EmbeddedModel, UTCDateTime, utc_now

# End-date values that mark an ongoing position
CURRENT_END_MARKERS = frozenset({"", "present", "current", "now"})

_DATE_FORMATS = ("%Y-%m-%d", "%Y-%m", "%Y/%m", "%m/%Y", "%Y")


def parse_resume_date(value: Optional[str]) -> Optional[datetime]:
    """Parse the loose date strings produced by extraction (YYYY-MM, YYYY, ...)."""
    if not value:
        return None
    value = value.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    match = re.search(r"(19|20)\d{2}", value)
    if match:
        return datetime(int(match.group(0)), 1, 1)
    return None


class _ExtractedModel(EmbeddedModel):
    """Extraction payloads come from LLM output; nulls become empty lists."""

    @field_validator("*", mode="before")
    @classmethod
    def null_to_default_list(cls, v: Any, info: Any) -> Any:
        field = cls.model_fields.get(info.field_name)
        if v is None and field is not None and field.default_factory is list:
            return []
        return v


class PersonalInfo(EmbeddedModel):
    """Personal fields visible only to privileged roles."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None

    @property
    def name_parts(self) -> list[str]:
        """Individual tokens of the candidate's name."""
        if not self.name:
            return []
        return [part for part in self.name.split() if part]


class Skill(_ExtractedModel):
    """A single extracted skill."""

    name: str
    category: Optional[str] = None  # technical, soft, language, other
    proficiency: Optional[str] = None  # beginner, intermediate, advanced, expert


class WorkExperience(_ExtractedModel):
    """A single work history entry."""

    company: Optional[str] = None
    position: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[str] = None  # YYYY-MM or YYYY
    end_date: Optional[str] = None  # YYYY-MM, YYYY or "present"
    description: Optional[str] = None
    achievements: list[str] = Field(default_factory=list)
    technologies: list[str] = Field(default_factory=list)

    @property
    def is_current(self) -> bool:
        return (self.end_date or "").strip().lower() in CURRENT_END_MARKERS

    def duration_years(self, now: Optional[datetime] = None) -> float:
        """Length of the position in years (0 when dates are unparseable)."""
        start = parse_resume_date(self.start_date)
        if start is None:
            return 0.0
        end = (now or utc_now()) if self.is_current else parse_resume_date(self.end_date)
        if end is None or end < start:
            return 0.0
        return (end - start).days / 365.25


class Education(_ExtractedModel):
    """A single education entry."""

    institution: Optional[str] = None
    degree: Optional[str] = None
    field: Optional[str] = None
    gpa: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    achievements: list[str] = Field(default_factory=list)


class Certification(_ExtractedModel):
    """A professional certification."""

    name: str
    issuer: Optional[str] = None
    issue_date: Optional[str] = None
    expiry_date: Optional[str] = None
    credential_id: Optional[str] = None


class Project(_ExtractedModel):
    """A personal or professional project."""

    name: str
    description: Optional[str] = None
    technologies: list[str] = Field(default_factory=list)
    url: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class Language(_ExtractedModel):
    """A spoken language and proficiency."""

    name: str
    proficiency: Optional[str] = None  # native, fluent, intermediate, basic


class ExtractedData(_ExtractedModel):
    """Structured record extracted from raw resume text."""

    skills: list[Skill] = Field(default_factory=list)
    experience: list[WorkExperience] = Field(default_factory=list)
    education: list[Education] = Field(default_factory=list)
    certifications: list[Certification] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    languages: list[Language] = Field(default_factory=list)


class ExtractedResume(EmbeddedModel):
    """Output of a structured extraction call: personal info plus extracted data."""

    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    extracted_data: ExtractedData = Field(default_factory=ExtractedData)
    used_fallback: bool = False

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ExtractedResume":
        """Build from a flat LLM payload (personal_info + section lists)."""
        sections = {k: v for k, v in payload.items() if k != "personal_info"}
        return cls(
            personal_info=PersonalInfo.model_validate(payload.get("personal_info") or {}),
            extracted_data=ExtractedData.model_validate(sections),
        )


class Resume(BaseDocument):
    """
    Processed resume document.

    Invariant maintained by ingestion: ``embedding`` is non-empty if and
    only if ``status`` is completed.
    """

    filename: Optional[str] = None
    uploaded_by: Optional[str] = None

    text: str = ""
    redacted_text: str = ""
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    extracted_data: ExtractedData = Field(default_factory=ExtractedData)

    embedding: list[float] = Field(default_factory=list)
    embedding_model: Optional[str] = None
    status: ProcessingStatus = ProcessingStatus.PROCESSING

    # Derived from work history at ingestion
    years_of_experience: Optional[float] = None
    current_position: Optional[str] = None
    current_company: Optional[str] = None
    location: Optional[str] = None

    # Analytics counters (never used in ranking)
    view_count: int = 0
    match_count: int = 0
    last_viewed: Optional[UTCDateTime] = None
    last_matched: Optional[UTCDateTime] = None

    @property
    def has_embedding(self) -> bool:
        return len(self.embedding) > 0

    @property
    def skill_names(self) -> list[str]:
        return [s.name for s in self.extracted_data.skills if s.name]

    @property
    def candidate_name(self) -> Optional[str]:
        return self.personal_info.name

    def derive_experience_summary(self, now: Optional[datetime] = None) -> None:
        """
        Compute years of experience and the current position from the work history.

        Years are the summed position durations rounded to one decimal. The
        current position is the first entry whose end date is "present",
        "current" or empty.
        """
        experience = self.extracted_data.experience
        if not experience:
            return

        total = sum(exp.duration_years(now) for exp in experience)
        self.years_of_experience = round(total, 1)

        current = next((exp for exp in experience if exp.is_current), None)
        if current is not None:
            self.current_position = current.position
            self.current_company = current.company

    class Settings:
        """MongoDB collection settings."""

        name = "resumes"
        indexes = [
            "status",
            "years_of_experience",
            "location",
            "extracted_data.skills.name",
            "created_at",
        ]
