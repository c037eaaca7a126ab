"""
Retrieval orchestrator.

Sequences the retrieval pipeline for every caller-facing operation:
embed the query, filter and score the corpus, redact by role, extract
snippets and synthesize answers. Every document leaving this module has
been passed through the PII redactor for the caller's role.
"""

import time
from collections import Counter
from datetime import timedelta
from typing import Any, Optional, Union

from pydantic import ValidationError

from resume_rag.core.exceptions import (
    InvalidFilterError,
    InvalidQueryError,
    JobNotFoundError,
)
from resume_rag.core.matching import MatchScorer, get_match_scorer, skill_overlap
from resume_rag.core.rag import AnswerSynthesizer, format_job_context, format_resume_context
from resume_rag.data.models import (
    AskMetadata,
    AskResponse,
    CandidateMatch,
    EvidenceItem,
    Job,
    JobMatchResponse,
    QueryContext,
    Resume,
    ResumeFilter,
    SearchFilters,
    SearchResponse,
    utc_now,
)
from resume_rag.data.store import DocumentStore
from resume_rag.ml.ethics.pii_redactor import PIIRedactor, get_pii_redactor
from resume_rag.ml.nlp.snippet_extractor import SnippetExtractor
from resume_rag.ml.providers import AIService, get_ai_service
from resume_rag.utils.config import AppSettings, get_settings
from resume_rag.utils.constants import (
    CANDIDATE_SEARCH_WEIGHTS,
    COMMON_QUERIES,
    EXPERIENCE_BANDS,
    MESSAGES,
    AuditAction,
    JobStatus,
    UserRole,
)
from resume_rag.utils.logger import LoggerMixin, audit_log

from .analytics import AnalyticsRecorder
from .candidate_index import CandidateIndex, ScoredResume

FiltersLike = Optional[Union[SearchFilters, dict[str, Any]]]


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class RetrievalOrchestrator(LoggerMixin):
    """
    Facade over search, question answering and job matching.

    Collaborators are injected so that tests and the CLI can substitute an
    in-memory store and stub providers; anything not supplied is built
    from application settings.
    """

    def __init__(
        self,
        store: DocumentStore,
        ai_service: Optional[AIService] = None,
        index: Optional[CandidateIndex] = None,
        scorer: Optional[MatchScorer] = None,
        snippets: Optional[SnippetExtractor] = None,
        synthesizer: Optional[AnswerSynthesizer] = None,
        analytics: Optional[AnalyticsRecorder] = None,
        redactor: Optional[PIIRedactor] = None,
        settings: Optional[AppSettings] = None,
    ):
        self.settings = settings or get_settings()
        retrieval = self.settings.retrieval

        self.store = store
        self.ai_service = ai_service or get_ai_service()
        self.redactor = redactor or get_pii_redactor()
        self.index = index or CandidateIndex(store, self.redactor, retrieval.min_similarity)
        self.scorer = scorer or get_match_scorer()
        self.snippets = snippets or SnippetExtractor(retrieval.snippet_length)
        self.synthesizer = synthesizer or AnswerSynthesizer(self.ai_service, retrieval.max_evidence)
        self.analytics = analytics or AnalyticsRecorder(store, retrieval.analytics_workers)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _parse_role(role: Union[UserRole, str]) -> UserRole:
        try:
            return UserRole(role)
        except ValueError as e:
            raise InvalidQueryError(f"Unknown role: {role}", cause=e) from e

    @staticmethod
    def _parse_filters(filters: FiltersLike) -> SearchFilters:
        if isinstance(filters, SearchFilters):
            return filters
        try:
            return SearchFilters.model_validate(filters or {})
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or None
            raise InvalidFilterError(
                f"Invalid search filter: {first.get('msg')}", field=field, cause=e
            ) from e

    def _build_context(
        self,
        query: str,
        k: int,
        filters: FiltersLike,
        role: Union[UserRole, str],
        requester_id: Optional[str],
    ) -> QueryContext:
        """Validate caller input into a QueryContext, raising typed input errors."""
        search_filters = self._parse_filters(filters)
        user_role = self._parse_role(role)

        if not isinstance(k, int) or k < 1:
            raise InvalidFilterError("k must be a positive integer", field="k")

        try:
            return QueryContext(
                query=query or "",
                filters=search_filters,
                k=k,
                role=user_role,
                requester_id=requester_id,
            )
        except ValidationError as e:
            raise InvalidQueryError("Query text is required", cause=e) from e

    @staticmethod
    def _candidate_name(resume: Resume, position: int, role: Union[UserRole, str]) -> str:
        if UserRole(role).is_privileged and resume.candidate_name:
            return resume.candidate_name
        return f"Candidate {position}"

    @staticmethod
    def _filters_out(context: QueryContext) -> dict[str, Any]:
        return context.filters.model_dump(exclude_defaults=True)

    def _metadata(self, start: float, degraded: bool = False) -> dict[str, Any]:
        return {
            "processing_time_ms": _elapsed_ms(start),
            "provider": self.ai_service.active_provider,
            "degraded": degraded,
        }

    def _corpus_size(self) -> int:
        return self.store.count_resumes(ResumeFilter(require_embedding=False))

    def _all_completed(self) -> list[Resume]:
        return self.store.find_resumes(ResumeFilter(require_embedding=False))

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search(
        self,
        query: str,
        k: Optional[int] = None,
        filters: FiltersLike = None,
        role: Union[UserRole, str] = UserRole.CANDIDATE,
        requester_id: Optional[str] = None,
    ) -> SearchResponse:
        """
        Semantic search over processed resumes.

        Args:
            query: Free-text query.
            k: Maximum number of documents to return.
            filters: Structural filters applied before scoring.
            role: Caller role; controls PII visibility.
            requester_id: Caller identity for query tracking.

        Returns:
            SearchResponse with role-redacted documents, each carrying its
            similarity, a query-relevant snippet and a display name.

        Raises:
            InvalidQueryError: Blank query or unknown role.
            InvalidFilterError: Malformed filters or ``k < 1``.
        """
        start = time.perf_counter()
        context = self._build_context(
            query, self.settings.retrieval.search_limit if k is None else k, filters, role, requester_id
        )
        filters_out = self._filters_out(context)

        if self._corpus_size() == 0:
            return SearchResponse(
                query=context.query,
                filters=filters_out,
                message=MESSAGES["empty_corpus"],
                metadata=self._metadata(start),
            )

        query_vector = self.ai_service.embed(context.query)
        if query_vector.size == 0:
            self.logger.warning("Query embedding unavailable, returning degraded search result")
            return SearchResponse(
                query=context.query,
                filters=filters_out,
                message=MESSAGES["ai_unavailable"],
                metadata=self._metadata(start, degraded=True),
            )

        ranked = self.index.rank(query_vector, ResumeFilter.from_search_filters(context.filters))
        ranked = ranked[: context.k]

        documents = []
        for position, item in enumerate(ranked, start=1):
            view = self.index.to_view(item, context.role)
            view["snippet"] = self.snippets.extract(
                view.get("text") or "", context.query, self.settings.retrieval.snippet_length
            )
            view["candidate_name"] = self._candidate_name(item.resume, position, context.role)
            documents.append(view)

        self.analytics.record_views([item.resume.doc_id for item in ranked])

        audit_log(
            AuditAction.SEARCH_PERFORMED.value,
            {"requester_id": requester_id, "role": context.role, "result_count": len(documents)},
            audit_type="ACCESS",
        )

        metadata = self._metadata(start)
        metadata["embedding_model"] = self.ai_service.embedding_model
        return SearchResponse(
            query=context.query,
            documents=documents,
            total_results=len(documents),
            filters=filters_out,
            message=MESSAGES["search_ok"] if documents else MESSAGES["no_matches"],
            metadata=metadata,
        )

    # -------------------------------------------------------------------------
    # Ask (RAG)
    # -------------------------------------------------------------------------

    def _evidence_item(self, item: ScoredResume, position: int, context: QueryContext) -> EvidenceItem:
        retrieval = self.settings.retrieval
        view = self.index.to_view(item, context.role)
        text = view.get("text") or ""

        excerpt = format_resume_context(
            view, self.snippets.extract(text, context.query, retrieval.context_snippet_length)
        )
        return EvidenceItem(
            resume_id=item.resume.doc_id,
            similarity=view["similarity"],
            snippet=self.snippets.extract(text, context.query, retrieval.snippet_length),
            candidate_name=self._candidate_name(item.resume, position, context.role),
            current_position=item.resume.current_position,
            years_of_experience=item.resume.years_of_experience or 0.0,
            key_skills=item.resume.skill_names[:5],
            excerpt=excerpt,
        )

    def _job_context(self, requester_id: str) -> str:
        retrieval = self.settings.retrieval
        jobs = self.store.find_jobs(
            status=JobStatus.ACTIVE.value,
            posted_by=requester_id,
            limit=retrieval.job_context_limit,
        )
        return format_job_context(jobs, retrieval.job_description_chars)

    def ask(
        self,
        query: str,
        k: Optional[int] = None,
        filters: FiltersLike = None,
        role: Union[UserRole, str] = UserRole.CANDIDATE,
        include_job_context: bool = False,
        requester_id: Optional[str] = None,
    ) -> AskResponse:
        """
        Answer a question about the resume corpus.

        Retrieves the top ``k`` resumes as evidence and asks the active AI
        provider for a cited answer. Empty corpus, unavailable embeddings
        and provider failures all produce well-formed responses.

        Args:
            query: Natural-language question.
            k: Number of resumes to retrieve as evidence.
            filters: Structural filters applied before scoring.
            role: Caller role; controls PII visibility in sources and prompt.
            include_job_context: Add the requester's open positions to the
                prompt (privileged callers only).
            requester_id: Caller identity.

        Raises:
            InvalidQueryError: Blank query or unknown role.
            InvalidFilterError: Malformed filters or ``k < 1``.
        """
        start = time.perf_counter()
        context = self._build_context(
            query, self.settings.retrieval.ask_limit if k is None else k, filters, role, requester_id
        )
        filters_out = self._filters_out(context)

        def _short(answer: str, message: str, degraded: bool = False) -> AskResponse:
            return AskResponse(
                query=context.query,
                answer=answer,
                filters=filters_out,
                message=message,
                metadata=AskMetadata(
                    processing_time_ms=_elapsed_ms(start),
                    provider=self.ai_service.active_provider,
                    degraded=degraded,
                ),
            )

        if self._corpus_size() == 0:
            return _short(MESSAGES["empty_corpus"], MESSAGES["empty_corpus"])

        query_vector = self.ai_service.embed(context.query)
        if query_vector.size == 0:
            self.logger.warning("Query embedding unavailable, returning degraded answer")
            return _short(MESSAGES["ai_unavailable"], MESSAGES["ai_unavailable"], degraded=True)

        ranked = self.index.rank(query_vector, ResumeFilter.from_search_filters(context.filters))
        ranked = ranked[: context.k]
        if not ranked:
            return _short(MESSAGES["no_matches"], MESSAGES["no_matches"])

        evidence = [
            self._evidence_item(item, position, context)
            for position, item in enumerate(ranked, start=1)
        ]

        job_context = ""
        if include_job_context and context.is_privileged and requester_id:
            job_context = self._job_context(requester_id)

        result = self.synthesizer.answer(
            context.query,
            evidence,
            max_evidence=self.settings.retrieval.max_evidence,
            job_context=job_context,
        )

        self.analytics.record_views([item.resume.doc_id for item in ranked])

        return AskResponse(
            query=context.query,
            answer=result.answer,
            sources=evidence,
            total_results=len(evidence),
            filters=filters_out,
            message=MESSAGES["ask_ok"],
            metadata=AskMetadata(
                processing_time_ms=_elapsed_ms(start),
                provider=self.ai_service.active_provider,
                model=self.ai_service.chat_model,
                embedding_model=self.ai_service.embedding_model,
                sources_used=result.source_count,
                degraded=result.degraded,
            ),
        )

    # -------------------------------------------------------------------------
    # Job matching
    # -------------------------------------------------------------------------

    def match_job(
        self,
        job: Union[Job, str],
        top_n: Optional[int] = None,
        role: Union[UserRole, str] = UserRole.CANDIDATE,
    ) -> JobMatchResponse:
        """
        Rank every processed resume against a job posting.

        Args:
            job: Job model or job id.
            top_n: Optional bound on returned matches.
            role: Caller role; controls PII visibility in match views.

        Returns:
            JobMatchResponse sorted by overall score, descending.

        Raises:
            JobNotFoundError: The job id is unknown.
            InvalidFilterError: ``top_n < 1``.
        """
        user_role = self._parse_role(role)
        if top_n is not None and top_n < 1:
            raise InvalidFilterError("top_n must be at least 1", field="top_n")

        if isinstance(job, Job):
            posting = job
        else:
            posting = self.store.get_job(job)
            if posting is None:
                raise JobNotFoundError(str(job))

        criteria = {
            name: f"{round(weight * 100)}%" for name, weight in self.scorer.weights.items()
        }

        resumes = self._all_completed()
        if not resumes:
            return JobMatchResponse(
                job_id=posting.doc_id,
                job_title=posting.title,
                company=posting.company or "",
                matching_criteria=criteria,
                message=MESSAGES["no_candidates"],
            )

        ranked = self.scorer.rank_candidates(posting, resumes)
        if top_n is not None:
            ranked = ranked[:top_n]

        matches = []
        for position, (resume, result) in enumerate(ranked, start=1):
            matches.append(
                CandidateMatch(
                    resume_id=resume.doc_id,
                    candidate_name=self._candidate_name(resume, position, user_role),
                    filename=resume.filename,
                    overall_score=result.overall_score,
                    semantic_similarity=result.semantic_similarity,
                    skills_match=result.skills_match,
                    experience_match=result.experience_match,
                    matched_skills=result.matched_skills,
                    missing_skills=result.missing_skills,
                    evidence=result.evidence,
                    years_of_experience=resume.years_of_experience or 0.0,
                    current_position=resume.current_position,
                    uploaded_at=resume.created_at,
                    resume=self.redactor.strip(resume, user_role),
                )
            )

        self.analytics.record_job_match(posting.doc_id, [result for _, result in ranked])

        audit_log(
            AuditAction.CANDIDATES_MATCHED.value,
            {"job_id": posting.doc_id, "role": user_role.value, "candidates": len(matches)},
            audit_type="DECISION",
        )

        return JobMatchResponse(
            job_id=posting.doc_id,
            job_title=posting.title,
            company=posting.company or "",
            matches=matches,
            total_candidates=len(matches),
            matching_criteria=criteria,
            message=MESSAGES["match_ok"],
        )

    def find_candidates_for_job(
        self,
        requirements: str,
        skills: Optional[list[str]] = None,
        k: int = 10,
        role: Union[UserRole, str] = UserRole.CANDIDATE,
    ) -> list[dict[str, Any]]:
        """
        Find candidates for free-text job requirements.

        Searches ``2k`` resumes by similarity, then re-scores each as
        ``0.6 * similarity + 0.4 * skill ratio`` and keeps the best ``k``.
        """
        user_role = self._parse_role(role)
        if k < 1:
            raise InvalidFilterError("k must be at least 1", field="k")

        skills = [s for s in (skills or []) if s and s.strip()]
        text = (requirements or "").strip()
        if skills:
            text = f"{text} Required skills: {', '.join(skills)}".strip()
        if not text:
            raise InvalidQueryError("Job requirements are required")

        query_vector = self.ai_service.embed(text)
        if query_vector.size == 0:
            self.logger.warning("Requirements embedding unavailable, no candidates returned")
            return []

        ranked = self.index.rank(query_vector)[: k * 2]

        weights = CANDIDATE_SEARCH_WEIGHTS
        candidates = []
        for item in ranked:
            matched, _ = skill_overlap(skills, item.resume.skill_names)
            ratio = len(matched) / len(skills) if skills else 0.0
            score = item.similarity * weights["semantic_similarity"] + ratio * weights["skills_match"]

            view = self.index.to_view(item, user_role)
            view["match_score"] = round(score, 2)
            view["skill_match_ratio"] = round(ratio, 2)
            view["matched_skills"] = matched
            candidates.append(view)

        candidates.sort(key=lambda c: c["match_score"], reverse=True)
        return candidates[:k]

    # -------------------------------------------------------------------------
    # Analytics and suggestions
    # -------------------------------------------------------------------------

    def search_analytics(self, timeframe_days: int = 30) -> dict[str, Any]:
        """Corpus statistics: totals, recent uploads, top skills, experience bands."""
        resumes = self._all_completed()
        cutoff = utc_now() - timedelta(days=timeframe_days)

        skill_counts = Counter(name for r in resumes for name in r.skill_names if name)

        bands = {band: 0 for band in EXPERIENCE_BANDS}
        for resume in resumes:
            years = resume.years_of_experience
            if years is None:
                continue
            for band, (low, high) in EXPERIENCE_BANDS.items():
                if years >= low and (high is None or years < high):
                    bands[band] += 1
                    break

        return {
            "total_resumes": len(resumes),
            "recent_uploads": sum(1 for r in resumes if r.created_at >= cutoff),
            "timeframe_days": timeframe_days,
            "top_skills": [
                {"skill": name, "count": count} for name, count in skill_counts.most_common(20)
            ],
            "experience_distribution": bands,
        }

    def query_suggestions(self, partial: str = "", limit: int = 10) -> list[str]:
        """Suggest queries containing ``partial`` (case-insensitive)."""
        resumes = self._all_completed()
        skills = Counter(name for r in resumes for name in r.skill_names if name)
        positions = Counter(r.current_position for r in resumes if r.current_position)

        suggestions = list(COMMON_QUERIES)
        suggestions += [f"Candidates with {name} skills" for name, _ in skills.most_common(10)]
        suggestions += [f"{position} candidates" for position, _ in positions.most_common(5)]

        needle = (partial or "").strip().lower()
        seen: set[str] = set()
        result = []
        for suggestion in suggestions:
            if needle and needle not in suggestion.lower():
                continue
            if suggestion in seen:
                continue
            seen.add(suggestion)
            result.append(suggestion)
        return result[:limit]

    def track_query(self, user_id: Optional[str], query: str, result_count: int) -> bool:
        """Record a query for analytics. Never raises."""
        return self.analytics.track_query(user_id, query, result_count)

    def close(self) -> None:
        """Wait for pending analytics writes and stop the worker."""
        self.analytics.shutdown()
