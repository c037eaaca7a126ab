"""
Retrieval pipeline: filtered similarity search, orchestration and analytics.
"""

from .analytics import AnalyticsRecorder
from .candidate_index import CandidateIndex, ScoredResume
from .orchestrator import RetrievalOrchestrator

__all__ = [
    "AnalyticsRecorder",
    "CandidateIndex",
    "ScoredResume",
    "RetrievalOrchestrator",
]
