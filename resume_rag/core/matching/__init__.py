"""Resume-vs-job match scoring module."""

from .match_scorer import (
    MatchScorer,
    experience_fit,
    get_match_scorer,
    skill_overlap,
)

__all__ = [
    "MatchScorer",
    "experience_fit",
    "get_match_scorer",
    "skill_overlap",
]
