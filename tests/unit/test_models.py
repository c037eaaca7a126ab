"""
Tests for Pydantic data models in resume_rag.data.models.
"""

from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from pydantic import ValidationError

from resume_rag.data.models import (
    ExtractedResume,
    Job,
    MatchResult,
    QueryContext,
    Resume,
    ResumeFilter,
    SearchFilters,
    WorkExperience,
    parse_resume_date,
    to_naive_utc,
    utc_now,
)
from resume_rag.data.models.base import PyObjectId
from resume_rag.utils.constants import MatchScoreLevel


# ── PyObjectId / BaseDocument ───────────────────────────────────────────────


class TestPyObjectId:
    def test_validate_from_string(self):
        oid = ObjectId()
        assert PyObjectId.validate(str(oid)) == oid

    def test_invalid_string_rejected(self):
        with pytest.raises(ValueError):
            PyObjectId.validate("not-an-id")

    def test_document_accepts_mongo_id(self):
        oid = ObjectId()
        resume = Resume.model_validate({"_id": oid, "text": "hello"})
        assert resume.doc_id == str(oid)

    def test_unsaved_document_dump_has_no_id(self):
        assert "_id" not in Resume(text="hello").model_dump_mongo()
        assert Resume().doc_id == ""


class TestTimestamps:
    def test_utc_suffix_normalized(self):
        resume = Resume.model_validate({"text": "hello", "created_at": "2024-01-01T00:00:00Z"})
        assert resume.created_at == datetime(2024, 1, 1)
        assert resume.created_at.tzinfo is None

    def test_offset_converted_to_utc(self):
        job = Job(title="Engineer", last_matched="2024-01-01T05:30:00+05:30")
        assert job.last_matched == datetime(2024, 1, 1)

    def test_naive_kept(self):
        resume = Resume(text="hello", last_viewed=datetime(2024, 6, 1, 8, 0))
        assert resume.last_viewed == datetime(2024, 6, 1, 8, 0)

    def test_defaults_are_naive(self):
        assert Resume(text="hello").created_at.tzinfo is None
        assert MatchResult().computed_at.tzinfo is None

    def test_aware_and_naive_comparable(self):
        aware = Resume(text="a", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        naive = Resume(text="b", created_at=datetime(2024, 1, 1, 1, 0))
        assert aware.created_at < naive.created_at
        window = ResumeFilter(
            status="processing", require_embedding=False, created_after="2023-12-31T23:00:00Z",
        )
        assert window.matches(aware)
        assert not window.model_copy(update={"created_after": datetime(2024, 1, 1, 0, 30)}).matches(aware)

    def test_to_naive_utc(self):
        aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=-4)))
        assert to_naive_utc(aware) == datetime(2024, 1, 1, 16, 0)
        assert utc_now().tzinfo is None


# ── SearchFilters ───────────────────────────────────────────────────────────


class TestSearchFilters:
    def test_camel_case_alias(self):
        filters = SearchFilters.model_validate({"experienceLevel": "senior"})
        assert filters.experience_level == "senior"

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            SearchFilters.model_validate({"salary": "100k"})

    def test_unknown_level_rejected(self):
        with pytest.raises(ValidationError):
            SearchFilters(experience_level="guru")

    def test_blank_values_dropped(self):
        filters = SearchFilters(location="  ", skills=["", " python ", "  "])
        assert filters.location is None
        assert filters.skills == ["python"]
        assert not filters.is_empty()

    def test_is_empty(self):
        assert SearchFilters().is_empty()


class TestResumeFilter:
    def test_from_none(self):
        f = ResumeFilter.from_search_filters(None)
        assert f.status == "completed"
        assert f.require_embedding

    def test_from_filters_maps_band(self):
        f = ResumeFilter.from_search_filters(
            SearchFilters(experience_level="mid", skills=["Go"], education="Master")
        )
        assert (f.years_min, f.years_max) == (2.0, 5.0)
        assert f.skills == ["Go"]
        assert f.education == "Master"


# ── QueryContext ────────────────────────────────────────────────────────────


class TestQueryContext:
    def test_query_stripped(self):
        assert QueryContext(query="  python  ").query == "python"

    def test_blank_query_rejected(self):
        with pytest.raises(ValidationError):
            QueryContext(query="   ")

    def test_k_must_be_positive(self):
        with pytest.raises(ValidationError):
            QueryContext(query="python", k=0)

    def test_privileged(self):
        assert QueryContext(query="q", role="recruiter").is_privileged
        assert not QueryContext(query="q").is_privileged


# ── Resume ──────────────────────────────────────────────────────────────────


class TestResume:
    def test_parse_resume_date(self):
        assert parse_resume_date("2020-06") == datetime(2020, 6, 1)
        assert parse_resume_date("Summer 2019") == datetime(2019, 1, 1)
        assert parse_resume_date("someday") is None
        assert parse_resume_date(None) is None

    def test_current_position_markers(self):
        assert WorkExperience(end_date="Present").is_current
        assert WorkExperience(end_date=None).is_current
        assert not WorkExperience(end_date="2020-01").is_current

    def test_derive_experience_summary(self):
        resume = Resume.model_validate({
            "extracted_data": {
                "experience": [
                    {"company": "Old Co", "position": "Dev", "start_date": "2010-01", "end_date": "2014-01"},
                    {"company": "New Co", "position": "Lead", "start_date": "2014-01", "end_date": "present"},
                ]
            }
        })
        resume.derive_experience_summary(now=datetime(2024, 1, 1))
        assert resume.years_of_experience == 14.0
        assert resume.current_position == "Lead"
        assert resume.current_company == "New Co"

    def test_unparseable_dates_count_zero(self):
        resume = Resume.model_validate({
            "extracted_data": {"experience": [{"position": "Dev", "start_date": "unknown"}]}
        })
        resume.derive_experience_summary()
        assert resume.years_of_experience == 0.0

    def test_no_experience_leaves_fields(self):
        resume = Resume(years_of_experience=3.0)
        resume.derive_experience_summary()
        assert resume.years_of_experience == 3.0


class TestExtractedResume:
    def test_from_payload_with_nulls(self):
        extracted = ExtractedResume.from_payload({
            "personal_info": None,
            "skills": [{"name": "Python", "category": "technical"}],
            "experience": None,
            "projects": [{"name": "Thing", "technologies": None}],
        })
        assert extracted.personal_info.name is None
        assert extracted.extracted_data.skills[0].name == "Python"
        assert extracted.extracted_data.experience == []
        assert extracted.extracted_data.projects[0].technologies == []
        assert not extracted.used_fallback


# ── Job ─────────────────────────────────────────────────────────────────────


class TestJob:
    def test_plain_skill_strings(self):
        job = Job(title="Engineer", skills=["Python", {"name": " Go ", "required": False}])
        assert job.skill_names == ["Python", "Go"]
        assert job.skills[1].required is False

    def test_title_required(self):
        with pytest.raises(ValidationError):
            Job(title="")

    def test_generate_search_keywords(self):
        job = Job(
            title="Backend Engineer",
            company="Acme",
            location="Remote",
            skills=["Python"],
            requirements=["Strong API design", "5 years"],
            experience_level="senior",
        )
        keywords = job.generate_search_keywords()
        assert keywords[:2] == ["backend engineer", "acme"]
        assert "python" in keywords
        assert "senior" in keywords
        assert "strong" in keywords
        assert "5" not in keywords
        assert job.search_keywords == keywords

    def test_embedding_text(self):
        job = Job(title="Engineer", description="Build things.", requirements=["Python"], skills=["Go"])
        assert job.embedding_text() == "Engineer\nBuild things.\nRequirements: Python\nSkills: Go"

    def test_is_active(self):
        assert Job(title="Engineer").is_active
        assert not Job(title="Engineer", status="closed").is_active


# ── MatchResult ─────────────────────────────────────────────────────────────


class TestMatchResult:
    def test_empty(self):
        result = MatchResult.empty("j1", "r1")
        assert result.overall_score == 0.0
        assert result.score_level == MatchScoreLevel.POOR

    def test_similarity_bounds(self):
        with pytest.raises(ValidationError):
            MatchResult(semantic_similarity=1.5)

    def test_cache_entry(self):
        result = MatchResult(overall_score=0.9, matched_skills=["python"])
        entry = result.to_cache_entry()
        assert entry["score"] == 0.9
        assert entry["matched_skills"] == ["python"]
        assert result.score_level == MatchScoreLevel.EXCELLENT
