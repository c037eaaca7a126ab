"""
Resume RAG - retrieval and matching engine for parsed resumes and job postings.

Combines embedding similarity search, heuristic match scoring, role-aware
PII redaction and retrieval-augmented answers over a resume corpus.
"""

__version__ = "0.1.0"
__app_name__ = "Resume RAG"
