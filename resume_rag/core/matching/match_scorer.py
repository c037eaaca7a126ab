"""
Resume-vs-job match scoring.

Combines semantic similarity, skill overlap and experience fit into one
weighted score, with deterministic evidence strings for explainability.
"""

from typing import Optional

from resume_rag.data.models import Job, MatchResult, Resume
from resume_rag.ml.embeddings.similarity import cosine
from resume_rag.utils.constants import (
    EVIDENCE_SKILL_LIMIT,
    EXPERIENCE_TIER_THRESHOLDS,
    MATCH_SCORING_WEIGHTS,
    ExperienceLevel,
)
from resume_rag.utils.logger import get_logger

logger = get_logger(__name__)


def skill_overlap(required: list[str], candidate: list[str]) -> tuple[list[str], list[str]]:
    """
    Match required skills against candidate skills.

    A required skill matches when, case-insensitively, either name contains
    the other. This tolerates naming variants but also over-matches short
    substrings.

    Returns:
        (matched, missing) lists of lowercased required skill names, in order.
    """
    candidate_lower = [c.strip().lower() for c in candidate if c and c.strip()]
    matched, missing = [], []
    for skill in required:
        name = skill.strip().lower()
        if not name:
            continue
        if any(c in name or name in c for c in candidate_lower):
            matched.append(name)
        else:
            missing.append(name)
    return matched, missing


def experience_fit(level: str, years: float) -> float:
    """Score candidate years against a job tier using the tier thresholds."""
    try:
        tier = ExperienceLevel(level).value
    except ValueError:
        logger.warning(f"Unknown experience level '{level}', scoring experience as 0")
        return 0.0

    full_at, partial_at, partial_score, floor_score = EXPERIENCE_TIER_THRESHOLDS[tier]
    if years >= full_at:
        return 1.0
    if years >= partial_at:
        return partial_score
    return floor_score


class MatchScorer:
    """
    Scores resumes against job postings.

    overall = 0.4 * semantic + 0.4 * skills + 0.2 * experience, each
    component and the total rounded to two decimals.
    """

    def __init__(self, weights: Optional[dict[str, float]] = None):
        """
        Initialize the scorer.

        Args:
            weights: Optional weights keyed like MATCH_SCORING_WEIGHTS
        """
        self.weights = weights or MATCH_SCORING_WEIGHTS

    def score(self, job: Job, resume: Resume) -> MatchResult:
        """
        Score one resume against one job.

        Args:
            job: Job posting with embedding and listed skills
            resume: Processed resume

        Returns:
            MatchResult; all zeros when either embedding is missing
        """
        if not job.has_embedding or not resume.has_embedding:
            return MatchResult.empty(job.doc_id, resume.doc_id)

        semantic = cosine(job.embedding, resume.embedding)

        job_skills = job.skill_names
        matched, missing = skill_overlap(job_skills, resume.skill_names)
        skills_score = len(matched) / len(job_skills) if job_skills else 0.0

        years = resume.years_of_experience or 0.0
        experience_score = experience_fit(job.experience_level, years)

        overall = (
            semantic * self.weights["semantic_similarity"]
            + skills_score * self.weights["skills_match"]
            + experience_score * self.weights["experience_match"]
        )

        return MatchResult(
            job_id=job.doc_id,
            resume_id=resume.doc_id,
            semantic_similarity=round(semantic, 2),
            skills_match=round(skills_score, 2),
            experience_match=round(experience_score, 2),
            overall_score=round(overall, 2),
            matched_skills=matched,
            missing_skills=missing,
            evidence=self._generate_evidence(matched, years, resume.current_position),
        )

    @staticmethod
    def _generate_evidence(
        matched: list[str],
        years: float,
        current_position: Optional[str],
    ) -> list[str]:
        evidence = []
        if matched:
            evidence.append(f"Matched skills: {', '.join(matched[:EVIDENCE_SKILL_LIMIT])}")
        if years > 0:
            evidence.append(f"{years:g} years of experience")
        if current_position:
            evidence.append(f"Current position: {current_position}")
        return evidence

    def rank_candidates(self, job: Job, resumes: list[Resume]) -> list[tuple[Resume, MatchResult]]:
        """
        Score and rank resumes for a job.

        Sorted by overall score descending; ties go to the most recently
        created resume.
        """
        scored = [(resume, self.score(job, resume)) for resume in resumes]
        scored.sort(key=lambda pair: pair[0].created_at, reverse=True)
        scored.sort(key=lambda pair: pair[1].overall_score, reverse=True)
        return scored


# Singleton instance
_scorer: Optional[MatchScorer] = None


def get_match_scorer() -> MatchScorer:
    """Get or create the match scorer singleton."""
    global _scorer
    if _scorer is None:
        _scorer = MatchScorer()
    return _scorer
