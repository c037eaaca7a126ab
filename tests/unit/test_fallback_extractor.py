"""
Tests for resume_rag.ml.nlp.fallback_extractor — regex resume extraction.
"""

import pytest

from resume_rag.ml.nlp import FallbackExtractor

RESUME_TEXT = """
Jane Smith
jane.smith@example.com | (555) 123-4567
linkedin.com/in/jane-smith | github.com/janesmith

Senior engineer working with Python, Django and Docker on AWS.
"""


@pytest.fixture
def extractor():
    return FallbackExtractor()


class TestContactDetails:
    def test_email(self, extractor):
        assert extractor.extract(RESUME_TEXT).personal_info.email == "jane.smith@example.com"

    def test_phone(self, extractor):
        assert extractor.extract(RESUME_TEXT).personal_info.phone == "(555) 123-4567"

    def test_profile_urls_prefixed(self, extractor):
        info = extractor.extract(RESUME_TEXT).personal_info
        assert info.linkedin == "https://linkedin.com/in/jane-smith"
        assert info.github == "https://github.com/janesmith"

    def test_missing_details_are_none(self, extractor):
        info = extractor.extract("No contact details here.").personal_info
        assert info.email is None
        assert info.phone is None
        assert info.linkedin is None


class TestSkills:
    def test_keyword_skills(self, extractor):
        names = [s.name for s in extractor.extract(RESUME_TEXT).extracted_data.skills]
        assert names == ["Python", "Django", "AWS", "Docker"]

    def test_skill_attributes(self, extractor):
        skill = extractor.extract_skills("python")[0]
        assert skill.category == "technical"
        assert skill.proficiency == "intermediate"

    def test_whole_words_only(self, extractor):
        names = [s.name for s in extractor.extract_skills("Worked at Google on JavaScript")]
        assert "Go" not in names
        assert "Java" not in names
        assert "JavaScript" in names

    def test_symbol_skills(self, extractor):
        names = [s.name for s in extractor.extract_skills("Fluent in C++ and C#.")]
        assert names == ["C++", "C#"]

    def test_custom_keywords(self):
        extractor = FallbackExtractor(skill_keywords=("Terraform",))
        assert [s.name for s in extractor.extract_skills("terraform, python")] == ["Terraform"]


class TestExtract:
    def test_flagged_as_fallback(self, extractor):
        assert extractor.extract(RESUME_TEXT).used_fallback

    def test_history_left_empty(self, extractor):
        data = extractor.extract(RESUME_TEXT).extracted_data
        assert data.experience == []
        assert data.education == []

    def test_empty_text(self, extractor):
        extracted = extractor.extract("")
        assert extracted.used_fallback
        assert extracted.extracted_data.skills == []
