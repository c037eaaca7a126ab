"""
Job posting data models for Resume RAG.

Defines the job posting schema consumed by candidate matching and by the
job context added to retrieval-augmented answers.
"""

from typing import Any, Optional

from pydantic import Field, field_validator

from resume_rag.utils.constants import MIN_KEYWORD_LENGTH, ExperienceLevel, JobStatus

from .base import BaseDocument, EmbeddedModel, UTCDateTime


class SkillRequirement(EmbeddedModel):
    """A skill listed on a job posting."""

    name: str
    level: Optional[str] = None  # beginner, intermediate, advanced, expert
    required: bool = True

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class Job(BaseDocument):
    """
    Job posting document.

    ``matching_results`` is an analytics cache keyed by resume id; match
    scores are always recomputed on demand.
    """

    title: str = Field(..., min_length=1, max_length=200)
    company: str = ""
    location: Optional[str] = None
    department: Optional[str] = None
    employment_type: Optional[str] = None
    remote_type: Optional[str] = None
    description: str = ""
    requirements: list[str] = Field(default_factory=list)
    skills: list[SkillRequirement] = Field(default_factory=list)
    experience_level: ExperienceLevel = ExperienceLevel.MID
    status: JobStatus = JobStatus.ACTIVE
    posted_by: Optional[str] = None

    embedding: list[float] = Field(default_factory=list)
    search_keywords: list[str] = Field(default_factory=list)

    # Analytics
    view_count: int = 0
    match_count: int = 0
    last_matched: Optional[UTCDateTime] = None
    matching_results: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @field_validator("skills", mode="before")
    @classmethod
    def coerce_skill_strings(cls, v: Any) -> Any:
        """Allow plain skill names in place of SkillRequirement objects."""
        if isinstance(v, list):
            return [{"name": s} if isinstance(s, str) else s for s in v]
        return v

    @property
    def has_embedding(self) -> bool:
        return len(self.embedding) > 0

    @property
    def skill_names(self) -> list[str]:
        return [s.name for s in self.skills if s.name]

    @property
    def is_active(self) -> bool:
        return self.status == JobStatus.ACTIVE

    def generate_search_keywords(self) -> list[str]:
        """Build and store the lowercase keyword set used for job search."""
        keywords: list[str] = []

        def _add(value: Optional[str]) -> None:
            if value:
                word = value.strip().lower()
                if word and word not in keywords:
                    keywords.append(word)

        for value in (
            self.title,
            self.company,
            self.location,
            self.department,
            self.remote_type,
            self.employment_type,
            self.experience_level,
        ):
            _add(value)

        for name in self.skill_names:
            _add(name)

        for requirement in self.requirements:
            for word in requirement.lower().split():
                if len(word) > MIN_KEYWORD_LENGTH:
                    _add(word)

        self.search_keywords = keywords
        return keywords

    def embedding_text(self) -> str:
        """Text to embed for this posting."""
        parts = [self.title, self.description]
        if self.requirements:
            parts.append("Requirements: " + "; ".join(self.requirements))
        if self.skill_names:
            parts.append("Skills: " + ", ".join(self.skill_names))
        return "\n".join(p for p in parts if p)

    class Settings:
        """MongoDB collection settings."""

        name = "jobs"
        indexes = [
            "status",
            "posted_by",
            "experience_level",
            "search_keywords",
            "created_at",
        ]
