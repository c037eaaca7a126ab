"""Retrieval-augmented answer synthesis."""

from .answer_synthesizer import AnswerSynthesizer, SynthesizedAnswer
from .prompts import (
    ANSWER_SYSTEM_PROMPT,
    build_answer_prompt,
    format_job_context,
    format_resume_context,
)

__all__ = [
    "AnswerSynthesizer",
    "SynthesizedAnswer",
    "ANSWER_SYSTEM_PROMPT",
    "build_answer_prompt",
    "format_job_context",
    "format_resume_context",
]
