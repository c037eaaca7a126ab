"""
Local Ollama provider.

Talks to a self-hosted Ollama server over HTTP. A refused connection puts
the provider into its cool-down state so that subsequent calls degrade
immediately instead of waiting on timeouts.
"""

from typing import Any, Optional

import requests

from resume_rag.core.exceptions import ProviderError, ProviderUnavailableError
from resume_rag.utils.config import AISettings, OllamaSettings, get_settings

from .base import EXTRACTION_PROMPT, AIProvider, parse_json_object

# HTTP statuses treated as transient overload
_TRANSIENT_STATUSES = frozenset({429, 503})


class OllamaProvider(AIProvider):
    """AI provider backed by a local Ollama server."""

    name = "ollama"
    unavailable_message = (
        "I'm unable to process your question at the moment. Please ensure Ollama is running."
    )

    def __init__(
        self,
        settings: Optional[OllamaSettings] = None,
        ai_settings: Optional[AISettings] = None,
        session: Optional[requests.Session] = None,
    ):
        app_settings = get_settings()
        self.settings = settings or app_settings.ollama
        ai_settings = ai_settings or app_settings.ai
        super().__init__(
            max_length=ai_settings.max_length,
            cooldown_seconds=ai_settings.cooldown_seconds,
        )
        self._session = session or requests.Session()

    @property
    def embedding_model(self) -> str:
        return self.settings.embedding_model

    @property
    def chat_model(self) -> str:
        return self.settings.chat_model

    @property
    def evidence_chars(self) -> int:
        return self.settings.evidence_chars

    def _post(self, endpoint: str, payload: dict[str, Any], timeout: float) -> dict[str, Any]:
        url = f"{self.settings.url}{endpoint}"
        try:
            resp = self._session.post(url, json=payload, timeout=timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.ConnectionError as e:
            raise ProviderUnavailableError(
                f"Ollama is not running at {self.settings.url}; start it and pull "
                f"{payload.get('model')}",
                provider=self.name,
                cause=e,
            ) from e
        except requests.Timeout as e:
            raise ProviderError(f"Ollama request to {endpoint} timed out", provider=self.name, cause=e) from e
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            error_cls = ProviderUnavailableError if status in _TRANSIENT_STATUSES else ProviderError
            raise error_cls(f"Ollama {endpoint} returned HTTP {status}", provider=self.name, cause=e) from e
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(f"Ollama {endpoint} failed: {e}", provider=self.name, cause=e) from e

    def _embed(self, text: str) -> list[float]:
        data = self._post(
            "/api/embeddings",
            {"model": self.embedding_model, "prompt": text},
            timeout=self.settings.embedding_timeout,
        )
        embedding = data.get("embedding")
        if not embedding:
            raise ProviderError("No embedding returned from Ollama", provider=self.name)
        self.logger.debug(f"Generated embedding with {len(embedding)} dimensions")
        return embedding

    def _run_generate(self, prompt: str, temperature: float, num_predict: int) -> str:
        data = self._post(
            "/api/generate",
            {
                "model": self.chat_model,
                "prompt": prompt,
                "stream": False,
                "options": {"temperature": temperature, "num_predict": num_predict},
            },
            timeout=self.settings.generation_timeout,
        )
        return (data.get("response") or "").strip()

    def _extract(self, text: str) -> dict[str, Any]:
        prompt = EXTRACTION_PROMPT.format(resume_text=text[: self.settings.extraction_chars])
        output = self._run_generate(prompt, temperature=0, num_predict=2000)
        return parse_json_object(output)

    def _generate(
        self,
        prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
    ) -> str:
        if system_prompt:
            prompt = f"{system_prompt}\n\n{prompt}"
        return self._run_generate(prompt, temperature=temperature, num_predict=max_tokens)

    def check_availability(self) -> bool:
        """Probe the tags endpoint with a short timeout."""
        try:
            resp = self._session.get(
                f"{self.settings.url}/api/tags", timeout=self.settings.probe_timeout
            )
        except requests.RequestException as e:
            self.logger.debug(f"Ollama probe failed: {e}")
            return False
        available = resp.status_code == 200
        if available:
            self.reset_state()
        return available
