"""
Filtered similarity search over stored resume embeddings.

The structural filter is applied by the document store before any
similarity is computed; surviving embeddings are scored in one vectorized
pass, floored, ranked, truncated and redacted for the caller's role.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

import numpy as np

from resume_rag.core.exceptions import InvalidFilterError, InvalidQueryError
from resume_rag.data.models import Resume, ResumeFilter
from resume_rag.data.store import DocumentStore
from resume_rag.ml.embeddings.similarity import VectorLike, batch_cosine
from resume_rag.ml.ethics.pii_redactor import PIIRedactor, get_pii_redactor
from resume_rag.utils.constants import MIN_SIMILARITY, UserRole
from resume_rag.utils.logger import LoggerMixin


@dataclass
class ScoredResume:
    """A resume and its similarity to the query (unredacted, internal only)."""

    resume: Resume
    similarity: float


class CandidateIndex(LoggerMixin):
    """Queryable view of the resume corpus for similarity search."""

    def __init__(
        self,
        store: DocumentStore,
        redactor: Optional[PIIRedactor] = None,
        min_similarity: float = MIN_SIMILARITY,
    ):
        """
        Initialize the index.

        Args:
            store: Document store providing structural filtering.
            redactor: Redactor applied to every returned view.
            min_similarity: Similarity floor below which results are dropped.
        """
        self.store = store
        self.redactor = redactor or get_pii_redactor()
        self.min_similarity = min_similarity

    @staticmethod
    def _validate_query_vector(query_vector: Optional[VectorLike]) -> np.ndarray:
        if query_vector is None:
            raise InvalidQueryError("A query embedding is required")
        vector = np.asarray(query_vector, dtype=np.float64)
        if vector.ndim != 1:
            raise InvalidQueryError(
                f"Query embedding must be one-dimensional, got shape {vector.shape}"
            )
        return vector

    def rank(
        self,
        query_vector: VectorLike,
        resume_filter: Optional[ResumeFilter] = None,
    ) -> list[ScoredResume]:
        """
        Score every resume passing the filter and rank by similarity.

        Args:
            query_vector: Query embedding.
            resume_filter: Structural filter; completed resumes by default.

        Returns:
            All results at or above the floor, most similar first; ties go
            to the most recently created resume.
        """
        vector = self._validate_query_vector(query_vector)
        if vector.size == 0:
            return []

        candidates = self.store.find_resumes(resume_filter or ResumeFilter())
        if not candidates:
            return []

        scores = batch_cosine(vector, [r.embedding for r in candidates])

        scored = [
            ScoredResume(resume=resume, similarity=float(score))
            for resume, score in zip(candidates, scores)
            if score >= self.min_similarity
        ]
        # Two stable sorts: recency is the tie-break for equal similarity
        scored.sort(key=lambda s: s.resume.created_at, reverse=True)
        scored.sort(key=lambda s: s.similarity, reverse=True)

        self.logger.debug(
            f"Scored {len(candidates)} resumes, {len(scored)} above floor {self.min_similarity}"
        )
        return scored

    def to_view(self, item: ScoredResume, role: Union[UserRole, str]) -> dict[str, Any]:
        """Role-redacted view of a ranked resume with its similarity attached."""
        view = self.redactor.strip(item.resume, role)
        view["similarity"] = round(item.similarity, 2)
        return view

    def search(
        self,
        query_vector: VectorLike,
        k: int,
        resume_filter: Optional[ResumeFilter] = None,
        role: Union[UserRole, str] = UserRole.CANDIDATE,
    ) -> list[dict[str, Any]]:
        """
        Return up to ``k`` role-redacted resume views ranked by similarity.

        An empty query vector or an empty filtered set yields an empty list.

        Raises:
            InvalidQueryError: The query vector is missing or not 1-D.
            InvalidFilterError: ``k`` is smaller than 1.
        """
        if k < 1:
            raise InvalidFilterError("k must be at least 1", field="k")

        ranked = self.rank(query_vector, resume_filter)[:k]
        return [self.to_view(item, role) for item in ranked]
