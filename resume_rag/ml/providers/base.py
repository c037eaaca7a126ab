"""
AI provider interface.

Every backend offers the same three capabilities: text embeddings,
structured resume extraction and free-text generation. Embedding and
extraction failures are absorbed here; generation failures are raised as
ProviderError for the caller to absorb.
"""

import json
import re
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

import numpy as np
from pydantic import ValidationError

from resume_rag.core.exceptions import ProviderError, ProviderUnavailableError
from resume_rag.data.models import ExtractedResume
from resume_rag.ml.nlp.fallback_extractor import FallbackExtractor, get_fallback_extractor
from resume_rag.utils.logger import LoggerMixin

EMPTY_EMBEDDING = np.empty(0, dtype=np.float32)

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

EXTRACTION_SYSTEM_PROMPT = (
    "You are an expert resume parser. Extract structured information from resumes "
    "and return valid JSON only. Be accurate and only include information that is "
    "explicitly stated."
)

EXTRACTION_PROMPT = """Extract structured information from this resume and return ONLY a valid JSON object with this exact structure:
{{
  "personal_info": {{
    "name": "Full name or null",
    "email": "Email or null",
    "phone": "Phone or null",
    "address": "Street address or null",
    "linkedin": "LinkedIn URL or null",
    "github": "GitHub URL or null",
    "portfolio": "Portfolio URL or null"
  }},
  "skills": [
    {{"name": "Skill name", "category": "technical|soft|language|other", "proficiency": "beginner|intermediate|advanced|expert"}}
  ],
  "experience": [
    {{
      "company": "Company name",
      "position": "Job title",
      "location": "Location or null",
      "start_date": "YYYY-MM or YYYY",
      "end_date": "YYYY-MM, YYYY or present",
      "description": "Brief description",
      "achievements": [],
      "technologies": []
    }}
  ],
  "education": [
    {{
      "institution": "School name",
      "degree": "Degree type",
      "field": "Field of study",
      "gpa": "GPA or null",
      "start_date": "YYYY",
      "end_date": "YYYY",
      "achievements": []
    }}
  ],
  "certifications": [{{"name": "", "issuer": "", "issue_date": "", "expiry_date": "", "credential_id": ""}}],
  "projects": [{{"name": "", "description": "", "technologies": [], "url": ""}}],
  "languages": [{{"name": "", "proficiency": "native|fluent|intermediate|basic"}}]
}}

Only include information that is explicitly mentioned in the resume. Use null or an empty array when a field is not found.

Resume text:
{resume_text}

Return ONLY the JSON object, no other text."""


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse the first {...} block found in model output."""
    match = _JSON_BLOCK.search(text or "")
    if not match:
        raise ValueError("No JSON object found in model output")
    payload = json.loads(match.group(0))
    if not isinstance(payload, dict):
        raise ValueError("Model output is not a JSON object")
    return payload


class AIProvider(ABC, LoggerMixin):
    """
    Abstract base class for AI backends.

    Tracks a degraded state entered on transient failures; while degraded,
    embedding calls return an empty vector immediately. The state clears
    itself once the cool-down window has elapsed.
    """

    name: str = "base"

    # Answer returned by the synthesizer when this provider's generation fails
    unavailable_message: str = "I'm unable to process your question at the moment."

    def __init__(
        self,
        max_length: int = 8000,
        cooldown_seconds: float = 60.0,
        fallback: Optional[FallbackExtractor] = None,
    ):
        self.max_length = max_length
        self.cooldown_seconds = cooldown_seconds
        self._fallback = fallback or get_fallback_extractor()
        self._degraded_until = 0.0
        self._state_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Model information
    # -------------------------------------------------------------------------

    @property
    @abstractmethod
    def embedding_model(self) -> str:
        """Name of the embedding model."""
        pass

    @property
    @abstractmethod
    def chat_model(self) -> str:
        """Name of the generation model."""
        pass

    @property
    @abstractmethod
    def evidence_chars(self) -> int:
        """Characters of each evidence item that fit in an answer prompt."""
        pass

    # -------------------------------------------------------------------------
    # Degraded state
    # -------------------------------------------------------------------------

    @property
    def is_available(self) -> bool:
        """False while inside a cool-down window."""
        return time.monotonic() >= self._degraded_until

    def mark_degraded(self, reason: str) -> None:
        """Enter the degraded state for one cool-down window."""
        with self._state_lock:
            self._degraded_until = time.monotonic() + self.cooldown_seconds
        self.logger.warning(
            f"{self.name} provider degraded for {self.cooldown_seconds:.0f}s: {reason}"
        )

    def reset_state(self) -> None:
        with self._state_lock:
            self._degraded_until = 0.0

    def _absorb(self, error: ProviderError, operation: str) -> None:
        if isinstance(error, ProviderUnavailableError):
            self.mark_degraded(error.message)
        else:
            self.logger.error(f"{self.name} {operation} error: {error.message}")

    # -------------------------------------------------------------------------
    # Backend hooks
    # -------------------------------------------------------------------------

    @abstractmethod
    def _embed(self, text: str) -> list[float]:
        """Embed already-truncated text. Raises ProviderError on failure."""
        pass

    @abstractmethod
    def _extract(self, text: str) -> dict[str, Any]:
        """Return the raw structured payload. Raises ProviderError on failure."""
        pass

    @abstractmethod
    def _generate(
        self,
        prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Generate free text. Raises ProviderError on failure."""
        pass

    @abstractmethod
    def check_availability(self) -> bool:
        """Cheap probe used by provider auto-detection."""
        pass

    # -------------------------------------------------------------------------
    # Public capabilities
    # -------------------------------------------------------------------------

    def embed(self, text: str, max_length: Optional[int] = None) -> np.ndarray:
        """
        Turn text into an embedding vector.

        Args:
            text: Input text; truncated to ``max_length`` characters.
            max_length: Optional override of the configured limit.

        Returns:
            float32 vector, or an empty vector when no signal is available.
        """
        if not text or not text.strip():
            return EMPTY_EMBEDDING
        if not self.is_available:
            self.logger.debug(f"{self.name} provider cooling down, returning empty embedding")
            return EMPTY_EMBEDDING

        truncated = text[: max_length or self.max_length]
        try:
            values = self._embed(truncated)
        except ProviderError as e:
            self._absorb(e, "embedding")
            return EMPTY_EMBEDDING

        if not values:
            self.logger.warning(f"{self.name} returned no embedding")
            return EMPTY_EMBEDDING
        return np.asarray(values, dtype=np.float32)

    def extract_structured(self, text: str) -> ExtractedResume:
        """
        Turn raw resume text into a structured record.

        Falls back to regex extraction when the provider fails or returns
        malformed output.
        """
        if not text or not text.strip():
            return self._fallback.extract("")
        if not self.is_available:
            return self._fallback.extract(text)

        try:
            payload = self._extract(text)
            return ExtractedResume.from_payload(payload)
        except ProviderError as e:
            self._absorb(e, "extraction")
        except (ValidationError, ValueError) as e:
            self.logger.error(f"{self.name} returned malformed extraction output: {e}")
        return self._fallback.extract(text)

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        """
        Generate text from a prompt.

        Raises:
            ProviderError: When the provider is cooling down, fails, or
                returns an empty response.
        """
        if not self.is_available:
            raise ProviderUnavailableError(f"{self.name} provider is cooling down", provider=self.name)
        try:
            answer = self._generate(prompt, system_prompt, temperature, max_tokens)
        except ProviderUnavailableError as e:
            self.mark_degraded(e.message)
            raise
        if not answer or not answer.strip():
            raise ProviderError(f"{self.name} returned an empty response", provider=self.name)
        return answer.strip()
