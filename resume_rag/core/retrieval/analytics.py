"""
Best-effort analytics side-channel.

Counter increments run on a background executor so they never block or
fail a search or match response.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Optional

from resume_rag.data.models import MatchResult
from resume_rag.data.store import DocumentStore
from resume_rag.utils.constants import AuditAction
from resume_rag.utils.logger import LoggerMixin, audit_log


class AnalyticsRecorder(LoggerMixin):
    """Asynchronous, best-effort writer for view and match counters."""

    def __init__(self, store: DocumentStore, max_workers: int = 1):
        self.store = store
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="resume-rag-analytics"
        )
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()

    def _submit(self, description: str, fn: Callable[..., Any], *args: Any) -> None:
        try:
            future = self._executor.submit(fn, *args)
        except RuntimeError as e:
            # Executor already shut down
            self.logger.warning(f"Analytics {description} dropped: {e}")
            return

        with self._pending_lock:
            self._pending.add(future)

        def _done(f: Future) -> None:
            with self._pending_lock:
                self._pending.discard(f)
            error = f.exception()
            if error is not None:
                self.logger.warning(f"Analytics {description} failed: {error}")

        future.add_done_callback(_done)

    def record_views(self, resume_ids: list[str]) -> None:
        """Increment view counters for resumes returned to a caller."""
        if resume_ids:
            self._submit("view update", self.store.increment_resume_counter, list(resume_ids), "view_count")

    def record_job_match(self, job_id: str, results: list[MatchResult]) -> None:
        """Increment match counters and cache match results on the job."""
        if not job_id:
            return
        cache = {r.resume_id: r.to_cache_entry() for r in results if r.resume_id}
        self._submit("job match update", self.store.record_job_matches, job_id, cache)
        if cache:
            self._submit("resume match update", self.store.increment_resume_counter, list(cache), "match_count")

    def track_query(self, user_id: Optional[str], query: str, result_count: int) -> bool:
        """Write a query audit record. Never raises."""
        try:
            audit_log(
                AuditAction.QUERY_TRACKED.value,
                {"user_id": user_id, "query": query, "result_count": result_count},
                audit_type="ACCESS",
            )
            return True
        except (ValueError, OSError) as e:
            self.logger.warning(f"Error tracking query: {e}")
            return False

    def flush(self, timeout: Optional[float] = None) -> None:
        """Wait for pending analytics writes."""
        with self._pending_lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
