"""
Match result models for Resume RAG.

A match associates one job with one resume. The overall score is a pure
function of the three sub-scores and is recomputed on demand.
"""

from typing import Any

from pydantic import Field

from resume_rag.utils.constants import MatchScoreLevel

from .base import EmbeddedModel, UTCDateTime, utc_now


class MatchResult(EmbeddedModel):
    """Scores and evidence for one resume evaluated against one job."""

    job_id: str = ""
    resume_id: str = ""

    semantic_similarity: float = Field(default=0.0, ge=-1, le=1)
    skills_match: float = Field(default=0.0, ge=0, le=1)
    experience_match: float = Field(default=0.0, ge=0, le=1)
    overall_score: float = 0.0

    matched_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)
    evidence: list[str] = Field(default_factory=list)

    computed_at: UTCDateTime = Field(default_factory=utc_now)

    @property
    def score_level(self) -> MatchScoreLevel:
        return MatchScoreLevel.from_score(self.overall_score)

    @classmethod
    def empty(cls, job_id: str = "", resume_id: str = "") -> "MatchResult":
        """All-zero result for pairs that cannot be scored."""
        return cls(job_id=job_id, resume_id=resume_id)

    def to_cache_entry(self) -> dict[str, Any]:
        """Compact form stored in the job's matching_results analytics cache."""
        return {
            "score": self.overall_score,
            "matched_skills": self.matched_skills,
            "missing_skills": self.missing_skills,
            "matched_at": self.computed_at,
        }
