"""
Document store abstraction for the retrieval core.

The core only needs conjunctive structural queries over resumes, job
lookups, and best-effort analytics writes. Two backends are provided: an
in-memory store (tests, CLI corpora) and a MongoDB store.
"""

import re
import threading
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from bson import ObjectId
from pymongo.errors import PyMongoError

from resume_rag.core.exceptions import StoreError
from resume_rag.data.models import Job, Resume, ResumeFilter, utc_now
from resume_rag.utils.logger import get_logger

logger = get_logger(__name__)

# Analytics counters and the timestamp field each one touches
COUNTER_FIELDS: dict[str, str] = {
    "view_count": "last_viewed",
    "match_count": "last_matched",
}


class DocumentStore(ABC):
    """Abstract base class for resume and job storage."""

    @abstractmethod
    def find_resumes(self, resume_filter: ResumeFilter) -> list[Resume]:
        """Return all resumes matching the filter."""
        pass

    @abstractmethod
    def count_resumes(self, resume_filter: Optional[ResumeFilter] = None) -> int:
        """Count resumes matching the filter (completed resumes by default)."""
        pass

    @abstractmethod
    def get_job(self, job_id: str) -> Optional[Job]:
        """Get a job posting by id."""
        pass

    @abstractmethod
    def find_jobs(
        self,
        status: Optional[str] = None,
        posted_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Job]:
        """Find job postings, most recent first."""
        pass

    @abstractmethod
    def add_resume(self, resume: Resume) -> Resume:
        """Insert a resume, assigning an id when missing."""
        pass

    @abstractmethod
    def add_job(self, job: Job) -> Job:
        """Insert a job posting, assigning an id when missing."""
        pass

    @abstractmethod
    def increment_resume_counter(self, resume_ids: Iterable[str], counter: str) -> None:
        """Increment an analytics counter on the given resumes."""
        pass

    @abstractmethod
    def record_job_matches(self, job_id: str, results: dict[str, dict[str, Any]]) -> None:
        """Increment the job's match counter and merge cached match results."""
        pass

    @staticmethod
    def _check_counter(counter: str) -> str:
        if counter not in COUNTER_FIELDS:
            raise ValueError(f"Unknown analytics counter: {counter}")
        return COUNTER_FIELDS[counter]


class InMemoryDocumentStore(DocumentStore):
    """Thread-safe in-memory store keyed by document id."""

    def __init__(
        self,
        resumes: Optional[Iterable[Resume]] = None,
        jobs: Optional[Iterable[Job]] = None,
    ):
        self._lock = threading.RLock()
        self._resumes: dict[str, Resume] = {}
        self._jobs: dict[str, Job] = {}
        for resume in resumes or []:
            self.add_resume(resume)
        for job in jobs or []:
            self.add_job(job)

    def add_resume(self, resume: Resume) -> Resume:
        if resume.id is None:
            resume.id = ObjectId()
        with self._lock:
            self._resumes[resume.doc_id] = resume
        return resume

    def add_job(self, job: Job) -> Job:
        if job.id is None:
            job.id = ObjectId()
        with self._lock:
            self._jobs[job.doc_id] = job
        return job

    def find_resumes(self, resume_filter: ResumeFilter) -> list[Resume]:
        with self._lock:
            snapshot = list(self._resumes.values())
        return [r.model_copy() for r in snapshot if resume_filter.matches(r)]

    def count_resumes(self, resume_filter: Optional[ResumeFilter] = None) -> int:
        resume_filter = resume_filter or ResumeFilter(require_embedding=False)
        with self._lock:
            return sum(1 for r in self._resumes.values() if resume_filter.matches(r))

    def get_resume(self, resume_id: str) -> Optional[Resume]:
        with self._lock:
            resume = self._resumes.get(str(resume_id))
        return resume.model_copy() if resume else None

    def get_job(self, job_id: str) -> Optional[Job]:
        with self._lock:
            job = self._jobs.get(str(job_id))
        return job.model_copy() if job else None

    def find_jobs(
        self,
        status: Optional[str] = None,
        posted_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Job]:
        with self._lock:
            jobs = [
                j for j in self._jobs.values()
                if (status is None or j.status == status)
                and (posted_by is None or j.posted_by == posted_by)
            ]
        jobs.sort(key=lambda j: j.created_at, reverse=True)
        if limit is not None:
            jobs = jobs[:limit]
        return [j.model_copy() for j in jobs]

    def increment_resume_counter(self, resume_ids: Iterable[str], counter: str) -> None:
        timestamp_field = self._check_counter(counter)
        now = utc_now()
        with self._lock:
            for resume_id in resume_ids:
                resume = self._resumes.get(str(resume_id))
                if resume is None:
                    continue
                setattr(resume, counter, getattr(resume, counter) + 1)
                setattr(resume, timestamp_field, now)

    def record_job_matches(self, job_id: str, results: dict[str, dict[str, Any]]) -> None:
        with self._lock:
            job = self._jobs.get(str(job_id))
            if job is None:
                return
            job.match_count += 1
            job.last_matched = utc_now()
            job.matching_results.update(results)


class MongoDocumentStore(DocumentStore):
    """MongoDB-backed store using the shared DatabaseManager."""

    def __init__(self, db_manager: Optional[Any] = None):
        from resume_rag.data.database import get_database_manager
        from resume_rag.utils.config import get_settings

        self._db_manager = db_manager or get_database_manager()
        db_settings = get_settings().database
        self._resumes_name = db_settings.resumes_collection
        self._jobs_name = db_settings.jobs_collection

    @property
    def resumes(self) -> Any:
        return self._db_manager.get_sync_collection(self._resumes_name)

    @property
    def jobs(self) -> Any:
        return self._db_manager.get_sync_collection(self._jobs_name)

    @staticmethod
    def _regex(value: str) -> re.Pattern:
        return re.compile(re.escape(value), re.IGNORECASE)

    @classmethod
    def build_resume_query(cls, resume_filter: ResumeFilter) -> dict[str, Any]:
        """Translate a ResumeFilter into a MongoDB query document."""
        query: dict[str, Any] = {"status": resume_filter.status}

        if resume_filter.require_embedding:
            query["embedding.0"] = {"$exists": True}

        years: dict[str, float] = {}
        if resume_filter.years_min is not None:
            years["$gte"] = resume_filter.years_min
        if resume_filter.years_max is not None:
            years["$lt"] = resume_filter.years_max
        if years:
            query["years_of_experience"] = years

        if resume_filter.location:
            query["location"] = cls._regex(resume_filter.location)
        if resume_filter.skills:
            query["extracted_data.skills.name"] = {
                "$in": [cls._regex(s) for s in resume_filter.skills]
            }
        if resume_filter.companies:
            query["extracted_data.experience.company"] = {
                "$in": [cls._regex(c) for c in resume_filter.companies]
            }
        if resume_filter.education:
            query["extracted_data.education.degree"] = cls._regex(resume_filter.education)
        if resume_filter.created_after:
            query["created_at"] = {"$gte": resume_filter.created_after}

        return query

    @staticmethod
    def _object_ids(ids: Iterable[str]) -> list[ObjectId]:
        return [ObjectId(i) for i in ids if ObjectId.is_valid(str(i))]

    def find_resumes(self, resume_filter: ResumeFilter) -> list[Resume]:
        try:
            cursor = self.resumes.find(self.build_resume_query(resume_filter))
            return [Resume.model_validate(doc) for doc in cursor]
        except PyMongoError as e:
            raise StoreError(f"Resume query failed: {e}", operation="find_resumes", cause=e) from e

    def count_resumes(self, resume_filter: Optional[ResumeFilter] = None) -> int:
        resume_filter = resume_filter or ResumeFilter(require_embedding=False)
        try:
            return self.resumes.count_documents(self.build_resume_query(resume_filter))
        except PyMongoError as e:
            raise StoreError(f"Resume count failed: {e}", operation="count_resumes", cause=e) from e

    def get_job(self, job_id: str) -> Optional[Job]:
        if not ObjectId.is_valid(str(job_id)):
            return None
        try:
            document = self.jobs.find_one({"_id": ObjectId(str(job_id))})
        except PyMongoError as e:
            raise StoreError(f"Job lookup failed: {e}", operation="get_job", cause=e) from e
        return Job.model_validate(document) if document else None

    def find_jobs(
        self,
        status: Optional[str] = None,
        posted_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Job]:
        query: dict[str, Any] = {}
        if status is not None:
            query["status"] = status
        if posted_by is not None:
            query["posted_by"] = posted_by
        try:
            cursor = self.jobs.find(query).sort("created_at", -1)
            if limit is not None:
                cursor = cursor.limit(limit)
            return [Job.model_validate(doc) for doc in cursor]
        except PyMongoError as e:
            raise StoreError(f"Job query failed: {e}", operation="find_jobs", cause=e) from e

    def add_resume(self, resume: Resume) -> Resume:
        result = self.resumes.insert_one(resume.model_dump_mongo())
        resume.id = result.inserted_id
        return resume

    def add_job(self, job: Job) -> Job:
        result = self.jobs.insert_one(job.model_dump_mongo())
        job.id = result.inserted_id
        return job

    def increment_resume_counter(self, resume_ids: Iterable[str], counter: str) -> None:
        timestamp_field = self._check_counter(counter)
        ids = self._object_ids(resume_ids)
        if not ids:
            return
        self.resumes.update_many(
            {"_id": {"$in": ids}},
            {"$inc": {counter: 1}, "$set": {timestamp_field: utc_now()}},
        )

    def record_job_matches(self, job_id: str, results: dict[str, dict[str, Any]]) -> None:
        if not ObjectId.is_valid(str(job_id)):
            return
        update: dict[str, Any] = {"last_matched": utc_now()}
        for resume_id, entry in results.items():
            update[f"matching_results.{resume_id}"] = entry
        self.jobs.update_one(
            {"_id": ObjectId(str(job_id))},
            {"$inc": {"match_count": 1}, "$set": update},
        )
