"""
Provider selection and the process-wide AI service.

The active provider is resolved once, on first use, by a probe-then-fallback
procedure and cached behind a lock (first caller wins). When nothing is
reachable the local provider handle is kept so calls degrade to empty
vectors and canned answers instead of raising.
"""

import threading
from typing import Optional

import numpy as np

from resume_rag.data.models import ExtractedResume
from resume_rag.utils.config import AppSettings, get_settings
from resume_rag.utils.constants import AIProviderName, AuditAction
from resume_rag.utils.logger import LoggerMixin, audit_log

from .base import AIProvider
from .ollama_provider import OllamaProvider
from .openai_provider import OpenAIProvider


class AIService(LoggerMixin):
    """
    Facade over the selected AI provider.

    Exposes embedding, structured extraction and generation without
    per-call provider checks; the resolved provider is stored once.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        openai_provider: Optional[AIProvider] = None,
        ollama_provider: Optional[AIProvider] = None,
    ):
        self._settings = settings or get_settings()
        self._openai = openai_provider
        self._ollama = ollama_provider
        self._active: Optional[AIProvider] = None
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Provider handles (constructed lazily)
    # -------------------------------------------------------------------------

    @property
    def openai(self) -> AIProvider:
        if self._openai is None:
            self._openai = OpenAIProvider(self._settings.openai, self._settings.ai)
        return self._openai

    @property
    def ollama(self) -> AIProvider:
        if self._ollama is None:
            self._ollama = OllamaProvider(self._settings.ollama, self._settings.ai)
        return self._ollama

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def _openai_configured(self) -> bool:
        return getattr(self.openai, "is_configured", self._settings.openai.is_configured)

    def _select(self) -> AIProvider:
        mode = self._settings.ai.provider

        if mode == AIProviderName.OLLAMA:
            self.logger.info("Using Ollama as AI provider")
            return self.ollama

        if mode == AIProviderName.OPENAI:
            self.logger.info("Using OpenAI as AI provider")
            return self.openai

        self.logger.info("Auto-detecting AI provider...")

        if self._openai_configured():
            if self.openai.check_availability():
                self.logger.info("OpenAI is available and working")
                return self.openai
            self.logger.warning("OpenAI not available, checking Ollama...")

        if self.ollama.check_availability():
            self.logger.info("Ollama is available and working")
            return self.ollama

        self.logger.error("No AI service available! Configure OpenAI or start Ollama")
        return self.ollama

    def initialize(self) -> AIProvider:
        """Resolve the active provider once; later calls return the cached handle."""
        if self._active is not None:
            return self._active

        with self._lock:
            if self._active is None:
                provider = self._select()
                audit_log(
                    AuditAction.PROVIDER_SELECTED.value,
                    {
                        "mode": self._settings.ai.provider,
                        "provider": provider.name,
                        "embedding_model": provider.embedding_model,
                    },
                    audit_type="SYSTEM",
                )
                self._active = provider
        return self._active

    @property
    def provider(self) -> AIProvider:
        return self.initialize()

    @property
    def active_provider(self) -> str:
        """Name of the resolved provider, or "none" before resolution."""
        if self._active is None:
            return AIProviderName.NONE.value
        return self._active.name

    @property
    def embedding_model(self) -> str:
        return self.provider.embedding_model

    @property
    def chat_model(self) -> str:
        return self.provider.chat_model

    # -------------------------------------------------------------------------
    # Capabilities
    # -------------------------------------------------------------------------

    def embed(self, text: str, max_length: Optional[int] = None) -> np.ndarray:
        """Embed text with the active provider (empty vector on failure)."""
        return self.provider.embed(text, max_length)

    def extract_structured(self, text: str) -> ExtractedResume:
        """Extract a structured record (regex fallback on failure)."""
        return self.provider.extract_structured(text)

    def generate_answer(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        """Generate text with the active provider. Raises ProviderError on failure."""
        return self.provider.generate(prompt, system_prompt, temperature, max_tokens)


# Global service instance guarded by a module lock
_ai_service: Optional[AIService] = None
_ai_service_lock = threading.Lock()


def get_ai_service() -> AIService:
    """Get the process-wide AI service."""
    global _ai_service
    if _ai_service is None:
        with _ai_service_lock:
            if _ai_service is None:
                _ai_service = AIService()
    return _ai_service


def reset_ai_service() -> None:
    """Drop the cached service so the next call re-runs provider selection."""
    global _ai_service
    with _ai_service_lock:
        _ai_service = None
