"""
Query, filter and response models for Resume RAG.

These models describe the ephemeral side of retrieval: the caller's query
context, the structural filters applied before scoring, and the response
envelopes returned by the orchestrator.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from resume_rag.utils.constants import (
    EXPERIENCE_BANDS,
    ExperienceLevel,
    ProcessingStatus,
    UserRole,
)

from .base import UTCDateTime
from .resume import Resume


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle.lower() in haystack.lower()


class SearchFilters(BaseModel):
    """User-facing structural filters for a search."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, extra="forbid")

    experience_level: Optional[ExperienceLevel] = Field(default=None, alias="experienceLevel")
    location: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    companies: list[str] = Field(default_factory=list)
    education: Optional[str] = None

    @field_validator("location", "education")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("skills", "companies")
    @classmethod
    def drop_blank_entries(cls, v: list[str]) -> list[str]:
        return [item.strip() for item in v if item and item.strip()]

    def is_empty(self) -> bool:
        return not (
            self.experience_level
            or self.location
            or self.skills
            or self.companies
            or self.education
        )


class ResumeFilter(BaseModel):
    """
    Conjunctive store-level predicate over resume documents.

    Always restricted to completed resumes with an embedding so that failed
    documents never reach any search path.
    """

    model_config = ConfigDict(use_enum_values=True)

    status: ProcessingStatus = ProcessingStatus.COMPLETED
    require_embedding: bool = True
    years_min: Optional[float] = None
    years_max: Optional[float] = None
    location: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    companies: list[str] = Field(default_factory=list)
    education: Optional[str] = None
    created_after: Optional[UTCDateTime] = None

    @classmethod
    def from_search_filters(cls, filters: Optional[SearchFilters]) -> "ResumeFilter":
        """Translate user-facing filters, mapping the experience level onto its band."""
        if filters is None:
            return cls()

        years_min = years_max = None
        if filters.experience_level:
            years_min, years_max = EXPERIENCE_BANDS[str(filters.experience_level)]

        return cls(
            years_min=years_min,
            years_max=years_max,
            location=filters.location,
            skills=list(filters.skills),
            companies=list(filters.companies),
            education=filters.education,
        )

    def matches(self, resume: Resume) -> bool:
        """Evaluate the predicate against a single resume."""
        if resume.status != self.status:
            return False
        if self.require_embedding and not resume.has_embedding:
            return False

        if self.years_min is not None or self.years_max is not None:
            years = resume.years_of_experience
            if years is None:
                return False
            if self.years_min is not None and years < self.years_min:
                return False
            if self.years_max is not None and years >= self.years_max:
                return False

        if self.location and not _contains(resume.location, self.location):
            return False

        if self.skills:
            names = resume.skill_names
            if not any(_contains(name, skill) for skill in self.skills for name in names):
                return False

        if self.companies:
            employers = [exp.company for exp in resume.extracted_data.experience]
            if not any(_contains(emp, company) for company in self.companies for emp in employers):
                return False

        if self.education:
            degrees = [edu.degree for edu in resume.extracted_data.education]
            if not any(_contains(degree, self.education) for degree in degrees):
                return False

        if self.created_after and resume.created_at < self.created_after:
            return False

        return True


class QueryContext(BaseModel):
    """A single search: query text, filters, result bound and caller role."""

    model_config = ConfigDict(use_enum_values=True)

    query: str = Field(..., min_length=1)
    filters: SearchFilters = Field(default_factory=SearchFilters)
    k: int = Field(default=5, ge=1)
    role: UserRole = UserRole.CANDIDATE
    requester_id: Optional[str] = None

    @field_validator("query", mode="before")
    @classmethod
    def strip_query(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @property
    def is_privileged(self) -> bool:
        return UserRole(self.role).is_privileged


# =============================================================================
# Response models
# =============================================================================


class EvidenceItem(BaseModel):
    """A retrieved resume cited as evidence for an answer."""

    resume_id: str
    similarity: float
    snippet: str
    candidate_name: str
    current_position: Optional[str] = None
    years_of_experience: float = 0.0
    key_skills: list[str] = Field(default_factory=list)

    # Role-appropriate context block used to build the answer prompt
    excerpt: str = Field(default="", exclude=True)


class CandidateMatch(BaseModel):
    """A resume ranked against a job posting."""

    resume_id: str
    candidate_name: str
    filename: Optional[str] = None
    overall_score: float
    semantic_similarity: float
    skills_match: float
    experience_match: float
    matched_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)
    evidence: list[str] = Field(default_factory=list)
    years_of_experience: float = 0.0
    current_position: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    resume: dict[str, Any] = Field(default_factory=dict)


class SearchResponse(BaseModel):
    """Result of a semantic search."""

    query: str
    documents: list[dict[str, Any]] = Field(default_factory=list)
    total_results: int = 0
    filters: dict[str, Any] = Field(default_factory=dict)
    message: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


class AskMetadata(BaseModel):
    """Timing and model information for an answered question."""

    processing_time_ms: int = 0
    provider: str = "none"
    model: Optional[str] = None
    embedding_model: Optional[str] = None
    sources_used: int = 0
    degraded: bool = False


class AskResponse(BaseModel):
    """Result of a retrieval-augmented question."""

    query: str
    answer: str
    sources: list[EvidenceItem] = Field(default_factory=list)
    total_results: int = 0
    filters: dict[str, Any] = Field(default_factory=dict)
    message: str = ""
    metadata: AskMetadata = Field(default_factory=AskMetadata)


class JobMatchResponse(BaseModel):
    """Candidates ranked against a job posting."""

    job_id: str
    job_title: str
    company: str = ""
    matches: list[CandidateMatch] = Field(default_factory=list)
    total_candidates: int = 0
    matching_criteria: dict[str, str] = Field(default_factory=dict)
    message: str = ""
