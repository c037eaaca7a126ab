"""
Vector similarity for resume and job embeddings.

Components:
- cosine: Exact cosine similarity between two vectors
- batch_cosine: Vectorized cosine of one query against many embeddings
"""

from .similarity import VectorLike, as_vector, batch_cosine, cosine

__all__ = [
    "VectorLike",
    "as_vector",
    "batch_cosine",
    "cosine",
]
