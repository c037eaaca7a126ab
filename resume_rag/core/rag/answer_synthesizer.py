"""
Answer synthesis over retrieved evidence.

Builds a bounded prompt from the top evidence items and asks the active
AI provider for a cited answer. Provider failures produce a fixed
apologetic answer; no retry is attempted here.
"""

from dataclasses import dataclass, field
from typing import Optional

from resume_rag.core.exceptions import ProviderError
from resume_rag.data.models import EvidenceItem
from resume_rag.ml.providers import AIService
from resume_rag.utils.constants import MESSAGES
from resume_rag.utils.logger import LoggerMixin

from .prompts import ANSWER_SYSTEM_PROMPT, build_answer_prompt


@dataclass
class SynthesizedAnswer:
    """Answer text plus the evidence actually given to the model."""

    answer: str
    evidence: list[EvidenceItem] = field(default_factory=list)
    source_count: int = 0
    degraded: bool = False


class AnswerSynthesizer(LoggerMixin):
    """Produces natural-language answers grounded in ranked evidence."""

    def __init__(self, ai_service: AIService, max_evidence: int = 5):
        """
        Initialize the synthesizer.

        Args:
            ai_service: Service whose active provider generates answers.
            max_evidence: Default number of evidence items in a prompt.
        """
        self.ai_service = ai_service
        self.max_evidence = max_evidence

    def answer(
        self,
        query: str,
        evidence: list[EvidenceItem],
        max_evidence: Optional[int] = None,
        job_context: str = "",
    ) -> SynthesizedAnswer:
        """
        Answer a query from ranked evidence.

        Args:
            query: The user's question.
            evidence: Evidence items, most relevant first.
            max_evidence: Number of items to include in the prompt.
            job_context: Optional secondary context such as open positions.

        Returns:
            SynthesizedAnswer; on provider failure the provider's fixed
            apology with an empty evidence list.
        """
        if not evidence:
            return SynthesizedAnswer(answer=MESSAGES["no_evidence"])

        limit = max_evidence or self.max_evidence
        top = evidence[:limit]
        provider = self.ai_service.provider

        prompt = build_answer_prompt(query, top, job_context, provider.evidence_chars)

        try:
            text = self.ai_service.generate_answer(
                prompt,
                system_prompt=ANSWER_SYSTEM_PROMPT,
                temperature=0.3,
                max_tokens=1000,
            )
        except ProviderError as e:
            self.logger.warning(f"Answer generation failed ({provider.name}): {e.message}")
            return SynthesizedAnswer(answer=provider.unavailable_message, degraded=True)

        self.logger.info(f"Generated answer from {len(top)} resumes with {provider.name}")
        return SynthesizedAnswer(answer=text, evidence=top, source_count=len(top))
