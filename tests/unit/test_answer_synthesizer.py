"""
Tests for resume_rag.core.rag — answer prompts and synthesis.
"""

import pytest

from resume_rag.core.rag import AnswerSynthesizer
from resume_rag.core.rag.prompts import (
    ANSWER_SYSTEM_PROMPT,
    NOT_SPECIFIED,
    build_answer_prompt,
    format_job_context,
    format_resume_context,
)
from resume_rag.data.models import EvidenceItem
from resume_rag.utils.constants import MESSAGES


def _evidence(n, excerpt=""):
    return [
        EvidenceItem(
            resume_id=f"r{i}",
            similarity=1.0 - i * 0.1,
            snippet=f"snippet {i}",
            candidate_name=f"Candidate {i + 1}",
            excerpt=excerpt,
        )
        for i in range(n)
    ]


# ── Prompts ─────────────────────────────────────────────────────────────────


class TestPrompts:
    def test_resume_context_defaults(self):
        block = format_resume_context({}, "excerpt text")
        assert f"Current Position: {NOT_SPECIFIED}" in block
        assert f"Key Skills: {NOT_SPECIFIED}" in block
        assert block.endswith("Relevant Text Excerpt: excerpt text")

    def test_resume_context_limits(self):
        view = {
            "years_of_experience": 4.5,
            "extracted_data": {
                "skills": [{"name": f"skill{i}"} for i in range(15)],
                "experience": [{"position": "Dev", "company": f"Co{i}"} for i in range(5)],
            },
        }
        block = format_resume_context(view, "")
        assert "skill9" in block and "skill10" not in block
        assert "Co2" in block and "Co3" not in block
        assert "Years of Experience: 4.5" in block

    def test_job_context(self, make_job):
        text = format_job_context([make_job()], description_chars=10)
        assert text == "\nOpen Positions:\n- Senior Python Engineer at Acme Corp: Build and \n"
        assert format_job_context([], 10) == ""

    def test_prompt_numbers_and_truncates(self):
        prompt = build_answer_prompt("who knows python?", _evidence(2, excerpt="x" * 50), "", 20)
        assert "Resume 1 (Candidate 1, similarity 1.00):\n" + "x" * 20 + "\n" in prompt
        assert "Resume 2 (Candidate 2, similarity 0.90)" in prompt
        assert "x" * 21 not in prompt
        assert 'User Query: "who knows python?"' in prompt

    def test_prompt_uses_snippet_without_excerpt(self):
        prompt = build_answer_prompt("q", _evidence(1), "", 100)
        assert "snippet 0" in prompt


# ── AnswerSynthesizer ───────────────────────────────────────────────────────


class TestAnswerSynthesizer:
    def test_no_evidence(self, ai_service, stub_provider):
        result = AnswerSynthesizer(ai_service).answer("who?", [])
        assert result.answer == MESSAGES["no_evidence"]
        assert result.source_count == 0
        assert stub_provider.prompts == []

    def test_answer_with_sources(self, ai_service, stub_provider):
        result = AnswerSynthesizer(ai_service).answer("who?", _evidence(3))
        assert result.answer == stub_provider.answer
        assert result.source_count == 3
        assert not result.degraded
        assert len(stub_provider.prompts) == 1

    def test_evidence_bounded(self, ai_service, stub_provider):
        result = AnswerSynthesizer(ai_service, max_evidence=2).answer("who?", _evidence(4))
        assert [e.resume_id for e in result.evidence] == ["r0", "r1"]
        assert "Resume 3" not in stub_provider.prompts[0]

    def test_call_override(self, ai_service):
        result = AnswerSynthesizer(ai_service).answer("who?", _evidence(4), max_evidence=1)
        assert result.source_count == 1

    def test_job_context_in_prompt(self, ai_service, stub_provider):
        AnswerSynthesizer(ai_service).answer("who?", _evidence(1), job_context="\nOpen Positions:\n- X\n")
        assert "Open Positions" in stub_provider.prompts[0]

    def test_failure_returns_provider_message(self, make_provider, make_service):
        provider = make_provider(fail_generation=True)
        result = AnswerSynthesizer(make_service(provider)).answer("who?", _evidence(2))
        assert result.answer == provider.unavailable_message
        assert result.evidence == []
        assert result.source_count == 0
        assert result.degraded

    def test_cooling_down_provider(self, make_provider, make_service):
        provider = make_provider()
        provider.mark_degraded("test")
        result = AnswerSynthesizer(make_service(provider)).answer("who?", _evidence(1))
        assert result.degraded
        assert provider.prompts == []

    def test_system_prompt_constant(self):
        assert "cite" in ANSWER_SYSTEM_PROMPT
