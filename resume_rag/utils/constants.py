"""
Application-wide constants for Resume RAG.

This module contains the fixed retrieval and scoring policy used throughout
the application. Values here are inspectable and testable in isolation but
are intentionally not exposed as runtime settings.
"""

from enum import Enum
from typing import Final, Optional


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "Resume RAG"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# Retrieval Constants
# =============================================================================

# Results below this cosine similarity are treated as unrelated noise
MIN_SIMILARITY: Final[float] = 0.1

# Sentences shorter than this are ignored by snippet extraction
MIN_SENTENCE_LENGTH: Final[int] = 20

# Query words must be longer than this to count as keywords
MIN_KEYWORD_LENGTH: Final[int] = 2

NO_TEXT_PLACEHOLDER: Final[str] = "No text content available"

# Years-of-experience bands used by the experience_level search filter.
# Lower bound inclusive, upper bound exclusive, None means unbounded.
EXPERIENCE_BANDS: Final[dict[str, tuple[float, Optional[float]]]] = {
    "entry": (0.0, 2.0),
    "mid": (2.0, 5.0),
    "senior": (5.0, 8.0),
    "lead": (8.0, 12.0),
    "executive": (12.0, None),
}


# =============================================================================
# Scoring Constants
# =============================================================================

# Weights for the resume-vs-job overall score
MATCH_SCORING_WEIGHTS: Final[dict[str, float]] = {
    "semantic_similarity": 0.4,
    "skills_match": 0.4,
    "experience_match": 0.2,
}

# Weights for ranking candidates against free-text job requirements
CANDIDATE_SEARCH_WEIGHTS: Final[dict[str, float]] = {
    "semantic_similarity": 0.6,
    "skills_match": 0.4,
}

# Experience fit per job tier:
# (full_credit_years, partial_credit_years, partial_score, floor_score)
EXPERIENCE_TIER_THRESHOLDS: Final[dict[str, tuple[float, float, float, float]]] = {
    "entry": (0.0, 0.0, 0.5, 0.5),
    "mid": (2.0, 1.0, 0.7, 0.4),
    "senior": (5.0, 3.0, 0.8, 0.3),
    "lead": (8.0, 5.0, 0.7, 0.2),
    "executive": (12.0, 8.0, 0.6, 0.1),
}

# Number of matched skills quoted in evidence strings
EVIDENCE_SKILL_LIMIT: Final[int] = 5

# Score thresholds
SCORE_THRESHOLDS: Final[dict[str, float]] = {
    "excellent": 0.85,
    "good": 0.70,
    "fair": 0.50,
    "poor": 0.30,
}


# =============================================================================
# Extraction Constants
# =============================================================================

# Keywords recognised by the regex fallback extractor
FALLBACK_SKILL_KEYWORDS: Final[tuple[str, ...]] = (
    "JavaScript", "Python", "Java", "C++", "C#", "PHP", "Ruby", "Go", "Rust",
    "React", "Angular", "Vue", "Node.js", "Express", "Django", "Flask",
    "HTML", "CSS", "MongoDB", "PostgreSQL", "MySQL", "Redis",
    "AWS", "Azure", "Docker", "Kubernetes", "Git", "TypeScript",
)


# =============================================================================
# Query Suggestions
# =============================================================================

COMMON_QUERIES: Final[tuple[str, ...]] = (
    "Find candidates with Python experience",
    "Show me senior developers with React skills",
    "Candidates with machine learning background",
    "Frontend developers with 3+ years experience",
    "Data scientists with PhD degree",
    "Full-stack developers familiar with AWS",
    "Mobile developers with iOS and Android experience",
    "DevOps engineers with Kubernetes knowledge",
    "Product managers with startup experience",
    "UI/UX designers with Figma skills",
)


# =============================================================================
# Response Messages
# =============================================================================

MESSAGES: Final[dict[str, str]] = {
    "empty_corpus": "No resumes found in the database. Please upload some resumes first.",
    "no_matches": (
        "I couldn't find any resumes that match your query. "
        "Please try rephrasing your question or adjusting your filters."
    ),
    "no_evidence": "I couldn't find any relevant resumes to answer your question.",
    "ai_unavailable": "AI service is temporarily unavailable. Please try again later.",
    "search_ok": "Search completed successfully",
    "ask_ok": "Query processed successfully",
    "match_ok": "Job matching completed successfully",
    "no_candidates": "No processed resumes are available for matching.",
}


# =============================================================================
# Enums
# =============================================================================


class UserRole(str, Enum):
    """Caller roles. Only privileged roles may see personal information."""

    CANDIDATE = "candidate"
    RECRUITER = "recruiter"
    ADMIN = "admin"

    @property
    def is_privileged(self) -> bool:
        return self in (UserRole.RECRUITER, UserRole.ADMIN)


class ExperienceLevel(str, Enum):
    """Experience tier of a job posting or a search filter."""

    ENTRY = "entry"  # 0-2 years
    MID = "mid"  # 2-5 years
    SENIOR = "senior"  # 5-8 years
    LEAD = "lead"  # 8-12 years
    EXECUTIVE = "executive"  # 12+ years

    @classmethod
    def from_years(cls, years: float) -> "ExperienceLevel":
        """Map years of experience onto its band."""
        for level, (low, high) in EXPERIENCE_BANDS.items():
            if years >= low and (high is None or years < high):
                return cls(level)
        return cls.ENTRY


class ProcessingStatus(str, Enum):
    """Lifecycle status of an ingested resume."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class JobStatus(str, Enum):
    """Status of a job posting."""

    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"


class AIProviderName(str, Enum):
    """Selectable AI backends."""

    AUTO = "auto"
    OPENAI = "openai"
    OLLAMA = "ollama"
    NONE = "none"


class MatchScoreLevel(Enum):
    """Categorical levels for match scores."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @classmethod
    def from_score(cls, score: float) -> "MatchScoreLevel":
        """Convert a numeric score to a level."""
        if score >= SCORE_THRESHOLDS["excellent"]:
            return cls.EXCELLENT
        elif score >= SCORE_THRESHOLDS["good"]:
            return cls.GOOD
        elif score >= SCORE_THRESHOLDS["fair"]:
            return cls.FAIR
        return cls.POOR


class AuditAction(str, Enum):
    """Types of actions that can be audited."""

    QUERY_TRACKED = "query_tracked"
    SEARCH_PERFORMED = "search_performed"
    CANDIDATES_MATCHED = "candidates_matched"
    PROVIDER_SELECTED = "provider_selected"
