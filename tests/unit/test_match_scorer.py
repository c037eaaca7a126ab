"""
Tests for resume_rag.core.matching.match_scorer — resume-vs-job scoring.
"""

from datetime import datetime

import pytest

from resume_rag.core.matching import MatchScorer, experience_fit, skill_overlap


@pytest.fixture
def scorer():
    return MatchScorer()


# ── skill_overlap ────────────────────────────────────────────────────────────


class TestSkillOverlap:
    def test_exact_case_insensitive(self):
        matched, missing = skill_overlap(["Python", "Docker"], ["python"])
        assert matched == ["python"]
        assert missing == ["docker"]

    def test_either_contains_the_other(self):
        matched, _ = skill_overlap(["React", "Node"], ["React Native", "node.js"])
        assert matched == ["react", "node"]

    def test_short_substrings_over_match(self):
        # Known trade-off: "go" is contained in "django"
        matched, _ = skill_overlap(["Go"], ["Django"])
        assert matched == ["go"]

    def test_blank_names_ignored(self):
        matched, missing = skill_overlap(["", "  ", "SQL"], ["", "PostgreSQL"])
        assert matched == ["sql"]
        assert missing == []


# ── experience_fit ───────────────────────────────────────────────────────────


class TestExperienceFit:
    @pytest.mark.parametrize(
        "years, expected",
        [(6, 1.0), (5, 1.0), (4, 0.8), (3, 0.8), (2.9, 0.3), (0, 0.3)],
    )
    def test_senior_tier(self, years, expected):
        assert experience_fit("senior", years) == expected

    def test_entry_tier_always_full(self):
        assert experience_fit("entry", 0) == 1.0

    def test_executive_partial(self):
        assert experience_fit("executive", 9) == 0.6
        assert experience_fit("executive", 2) == 0.1

    def test_unknown_tier(self):
        assert experience_fit("wizard", 10) == 0.0


# ── score ────────────────────────────────────────────────────────────────────


class TestScore:
    def test_reference_example(self, scorer, make_job, make_resume):
        job = make_job(skills=("Python",), experience_level="senior", embedding=(1.0, 0.0))
        resume = make_resume(
            skills=("python", "django"), years=6.0, embedding=(1.0, 3 ** 0.5)
        )
        result = scorer.score(job, resume)
        assert result.semantic_similarity == 0.5
        assert result.skills_match == 1.0
        assert result.experience_match == 1.0
        assert result.overall_score == 0.8

    def test_missing_embedding_is_all_zero(self, scorer, make_job, make_resume):
        result = scorer.score(make_job(), make_resume(embedding=()))
        assert result.overall_score == 0.0
        assert result.semantic_similarity == 0.0
        assert result.skills_match == 0.0
        assert result.experience_match == 0.0
        assert result.evidence == []

    def test_job_without_skills(self, scorer, make_job, make_resume):
        result = scorer.score(make_job(skills=()), make_resume())
        assert result.skills_match == 0.0

    def test_skill_ratio(self, scorer, make_job, make_resume):
        job = make_job(skills=("Python", "Kubernetes", "Go", "Rust"))
        resume = make_resume(skills=("Python",))
        result = scorer.score(job, resume)
        assert result.skills_match == 0.25
        assert result.missing_skills == ["kubernetes", "go", "rust"]

    def test_evidence_strings(self, scorer, make_job, make_resume):
        result = scorer.score(make_job(), make_resume(years=6.5, position="Staff Engineer"))
        assert result.evidence == [
            "Matched skills: python, django",
            "6.5 years of experience",
            "Current position: Staff Engineer",
        ]

    def test_deterministic(self, scorer, make_job, make_resume):
        job, resume = make_job(), make_resume(embedding=(0.3, 0.4, 0.5))
        first, second = scorer.score(job, resume), scorer.score(job, resume)
        assert first.model_dump(exclude={"computed_at"}) == second.model_dump(exclude={"computed_at"})

    def test_custom_weights(self, make_job, make_resume):
        scorer = MatchScorer({"semantic_similarity": 1.0, "skills_match": 0.0, "experience_match": 0.0})
        result = scorer.score(make_job(), make_resume(skills=("Excel",)))
        assert result.overall_score == 1.0


# ── rank_candidates ──────────────────────────────────────────────────────────


class TestRankCandidates:
    def test_sorted_by_overall_score(self, scorer, make_job, make_resume):
        strong = make_resume(name="Strong Fit")
        weak = make_resume(name="Weak Fit", skills=("Excel",), years=1.0, embedding=(0.0, 1.0, 0.0))
        ranked = scorer.rank_candidates(make_job(), [weak, strong])
        assert [r.candidate_name for r, _ in ranked] == ["Strong Fit", "Weak Fit"]

    def test_ties_broken_by_recency(self, scorer, make_job, make_resume):
        older = make_resume(name="Older Resume", created_at=datetime(2023, 1, 1))
        newer = make_resume(name="Newer Resume", created_at=datetime(2024, 1, 1))
        ranked = scorer.rank_candidates(make_job(), [older, newer])
        assert ranked[0][1].overall_score == ranked[1][1].overall_score
        assert [r.candidate_name for r, _ in ranked] == ["Newer Resume", "Older Resume"]
