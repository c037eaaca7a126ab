"""
Cosine similarity over embedding vectors.

Degenerate inputs (empty vectors, mismatched dimensions, zero norms)
resolve to a similarity of exactly 0 so that documents with failed
embeddings rank last instead of breaking a batch.
"""

from typing import Sequence, Union

import numpy as np

VectorLike = Union[Sequence[float], np.ndarray]


def as_vector(values: VectorLike) -> np.ndarray:
    """Convert a list or array to a 1-D float64 vector."""
    return np.asarray(values, dtype=np.float64).ravel()


def cosine(a: VectorLike, b: VectorLike) -> float:
    """
    Compute the cosine similarity between two vectors.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        Similarity in [-1, 1]; exactly 0.0 when either vector is empty,
        the lengths differ, or either norm is zero.
    """
    va = as_vector(a)
    vb = as_vector(b)
    if va.size == 0 or vb.size == 0 or va.size != vb.size:
        return 0.0

    norm_a = float(np.sqrt(np.dot(va, va)))
    norm_b = float(np.sqrt(np.dot(vb, vb)))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    value = float(np.dot(va, vb)) / (norm_a * norm_b)
    return float(np.clip(value, -1.0, 1.0))


def batch_cosine(query: VectorLike, vectors: Sequence[VectorLike]) -> np.ndarray:
    """
    Vectorized cosine similarity of one query against many vectors.

    Vectors whose dimension differs from the query (or that are empty or
    all-zero) score exactly 0.

    Args:
        query: Query vector.
        vectors: Candidate vectors, possibly of mixed dimension.

    Returns:
        Array of similarities aligned with ``vectors``.
    """
    q = as_vector(query)
    scores = np.zeros(len(vectors), dtype=np.float64)
    if q.size == 0 or not len(vectors):
        return scores

    q_norm = float(np.sqrt(np.dot(q, q)))
    if q_norm == 0.0:
        return scores

    rows = [i for i, v in enumerate(vectors) if len(v) == q.size]
    if not rows:
        return scores

    matrix = np.asarray([vectors[i] for i in rows], dtype=np.float64)
    norms = np.sqrt(np.einsum("ij,ij->i", matrix, matrix))
    dots = matrix @ q

    valid = norms > 0
    sims = np.zeros(len(rows), dtype=np.float64)
    sims[valid] = dots[valid] / (norms[valid] * q_norm)
    scores[rows] = np.clip(sims, -1.0, 1.0)
    return scores
