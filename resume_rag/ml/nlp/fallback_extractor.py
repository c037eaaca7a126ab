"""
Regex-based fallback extraction for resumes.

Used when an AI provider cannot produce structured data. Recovers contact
details and a keyword-matched skill list; work history and education are
left empty.
"""

import re
from typing import Optional

from resume_rag.data.models import ExtractedData, ExtractedResume, PersonalInfo, Skill
from resume_rag.utils.constants import FALLBACK_SKILL_KEYWORDS
from resume_rag.utils.logger import get_logger

logger = get_logger(__name__)


class FallbackExtractor:
    """Extracts a minimal structured record from raw resume text."""

    EMAIL_PATTERN = re.compile(r"[\w.-]+@[\w.-]+\.\w+")

    PHONE_PATTERN = re.compile(r"(\+\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")

    LINKEDIN_PATTERN = re.compile(r"linkedin\.com/in/[\w-]+", re.IGNORECASE)

    GITHUB_PATTERN = re.compile(r"github\.com/[\w-]+", re.IGNORECASE)

    def __init__(self, skill_keywords: Optional[tuple[str, ...]] = None):
        keywords = skill_keywords or FALLBACK_SKILL_KEYWORDS
        self._skill_patterns = [
            (skill, re.compile(rf"(?<!\w){re.escape(skill)}(?!\w)", re.IGNORECASE))
            for skill in keywords
        ]

    @staticmethod
    def _first(pattern: re.Pattern, text: str) -> Optional[str]:
        match = pattern.search(text)
        return match.group(0) if match else None

    def extract_skills(self, text: str) -> list[Skill]:
        """Keyword skills mentioned anywhere in the text."""
        return [
            Skill(name=skill, category="technical", proficiency="intermediate")
            for skill, pattern in self._skill_patterns
            if pattern.search(text)
        ]

    def extract(self, text: str) -> ExtractedResume:
        """
        Build a fallback structured record.

        Args:
            text: Raw resume text.

        Returns:
            ExtractedResume flagged with ``used_fallback``.
        """
        logger.info("Using fallback resume parser (regex-based)")
        text = text or ""

        linkedin = self._first(self.LINKEDIN_PATTERN, text)
        github = self._first(self.GITHUB_PATTERN, text)

        personal_info = PersonalInfo(
            email=self._first(self.EMAIL_PATTERN, text),
            phone=self._first(self.PHONE_PATTERN, text),
            linkedin=f"https://{linkedin}" if linkedin else None,
            github=f"https://{github}" if github else None,
        )

        return ExtractedResume(
            personal_info=personal_info,
            extracted_data=ExtractedData(skills=self.extract_skills(text)),
            used_fallback=True,
        )


# Singleton instance
_fallback: Optional[FallbackExtractor] = None


def get_fallback_extractor() -> FallbackExtractor:
    """Get the fallback extractor singleton instance."""
    global _fallback
    if _fallback is None:
        _fallback = FallbackExtractor()
    return _fallback
