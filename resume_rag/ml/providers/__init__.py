"""
AI provider abstraction.

Two interchangeable backends (hosted OpenAI, local Ollama) behind one
interface offering embeddings, structured extraction and generation,
plus the AIService that selects one of them per process.
"""

from .base import EMPTY_EMBEDDING, AIProvider, parse_json_object
from .openai_provider import OpenAIProvider
from .ollama_provider import OllamaProvider
from .ai_service import AIService, get_ai_service, reset_ai_service

__all__ = [
    "EMPTY_EMBEDDING",
    "AIProvider",
    "parse_json_object",
    "OpenAIProvider",
    "OllamaProvider",
    "AIService",
    "get_ai_service",
    "reset_ai_service",
]
