"""
Hosted OpenAI provider.

Embeddings via the embeddings endpoint, extraction and answers via chat
completions. Rate limiting and connection failures put the provider into
its cool-down state.
"""

from typing import Any, Optional

import openai
from openai import OpenAI

from resume_rag.core.exceptions import ProviderError, ProviderUnavailableError
from resume_rag.utils.config import AISettings, OpenAISettings, get_settings

from .base import EXTRACTION_PROMPT, EXTRACTION_SYSTEM_PROMPT, AIProvider, parse_json_object


class OpenAIProvider(AIProvider):
    """AI provider backed by the OpenAI API."""

    name = "openai"
    unavailable_message = (
        "I'm unable to process your question at the moment due to AI service "
        "limitations. Please try again later."
    )

    def __init__(
        self,
        settings: Optional[OpenAISettings] = None,
        ai_settings: Optional[AISettings] = None,
        client: Optional[Any] = None,
    ):
        app_settings = get_settings()
        self.settings = settings or app_settings.openai
        ai_settings = ai_settings or app_settings.ai
        super().__init__(
            max_length=ai_settings.max_length,
            cooldown_seconds=ai_settings.cooldown_seconds,
        )
        self._client = client

    @property
    def embedding_model(self) -> str:
        return self.settings.embedding_model

    @property
    def chat_model(self) -> str:
        return self.settings.chat_model

    @property
    def evidence_chars(self) -> int:
        return self.settings.evidence_chars

    @property
    def is_configured(self) -> bool:
        return self._client is not None or self.settings.is_configured

    @property
    def client(self) -> Any:
        """Lazily created SDK client; requires an API key."""
        if self._client is None:
            if not self.settings.is_configured:
                raise ProviderError("OpenAI API key is required", provider=self.name)
            self._client = OpenAI(
                api_key=self.settings.api_key,
                timeout=self.settings.timeout,
                max_retries=0,
            )
        return self._client

    def _translate(self, error: openai.OpenAIError, operation: str) -> ProviderError:
        """Map SDK exceptions onto the provider error taxonomy."""
        if isinstance(error, openai.RateLimitError):
            return ProviderUnavailableError(
                f"OpenAI rate limit exceeded during {operation}", provider=self.name, cause=error
            )
        if isinstance(error, openai.APIConnectionError):
            return ProviderUnavailableError(
                f"OpenAI unreachable during {operation}: {error}", provider=self.name, cause=error
            )
        if isinstance(error, openai.AuthenticationError):
            self.logger.error("Invalid OpenAI API key, check OPENAI_API_KEY")
        return ProviderError(f"OpenAI {operation} failed: {error}", provider=self.name, cause=error)

    def _embed(self, text: str) -> list[float]:
        try:
            response = self.client.embeddings.create(model=self.embedding_model, input=text)
        except openai.OpenAIError as e:
            raise self._translate(e, "embedding") from e
        return list(response.data[0].embedding)

    def _extract(self, text: str) -> dict[str, Any]:
        prompt = EXTRACTION_PROMPT.format(resume_text=text[: self.settings.extraction_chars])
        try:
            response = self.client.chat.completions.create(
                model=self.chat_model,
                messages=[
                    {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0,
                max_tokens=2000,
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as e:
            raise self._translate(e, "extraction") from e
        return parse_json_object(response.choices[0].message.content or "")

    def _generate(
        self,
        prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
    ) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        try:
            response = self.client.chat.completions.create(
                model=self.chat_model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.OpenAIError as e:
            raise self._translate(e, "generation") from e
        return response.choices[0].message.content or ""

    def check_availability(self) -> bool:
        """Probe with a tiny embedding call."""
        if not self.is_configured:
            return False
        return self.embed("test").size > 0
