"""
Pydantic data models and schemas for Resume RAG.

This module provides the document models read by the retrieval core,
the match result model, and the query/response schemas.
"""

# Base models
from .base import (
    BaseDocument,
    EmbeddedModel,
    PyObjectId,
    TimestampMixin,
    UTCDateTime,
    to_naive_utc,
    utc_now,
)

# Resume models
from .resume import (
    Certification,
    Education,
    ExtractedData,
    ExtractedResume,
    Language,
    PersonalInfo,
    Project,
    Resume,
    Skill,
    WorkExperience,
    parse_resume_date,
)

# Job models
from .job import Job, SkillRequirement

# Match models
from .match import MatchResult

# Query and response models
from .query import (
    AskMetadata,
    AskResponse,
    CandidateMatch,
    EvidenceItem,
    JobMatchResponse,
    QueryContext,
    ResumeFilter,
    SearchFilters,
    SearchResponse,
)

__all__ = [
    # Base
    "BaseDocument",
    "EmbeddedModel",
    "PyObjectId",
    "TimestampMixin",
    "UTCDateTime",
    "to_naive_utc",
    "utc_now",
    # Resume
    "Certification",
    "Education",
    "ExtractedData",
    "ExtractedResume",
    "Language",
    "PersonalInfo",
    "Project",
    "Resume",
    "Skill",
    "WorkExperience",
    "parse_resume_date",
    # Job
    "Job",
    "SkillRequirement",
    # Match
    "MatchResult",
    # Query
    "AskMetadata",
    "AskResponse",
    "CandidateMatch",
    "EvidenceItem",
    "JobMatchResponse",
    "QueryContext",
    "ResumeFilter",
    "SearchFilters",
    "SearchResponse",
]
