"""
Text processing for retrieval.

Components:
- SnippetExtractor: Picks the most query-relevant excerpt of a document
- FallbackExtractor: Regex-based structured extraction used when no AI
  provider can parse a resume
"""

from .fallback_extractor import FallbackExtractor, get_fallback_extractor
from .snippet_extractor import ScoredSentence, SnippetExtractor

__all__ = [
    "FallbackExtractor",
    "get_fallback_extractor",
    "ScoredSentence",
    "SnippetExtractor",
]
