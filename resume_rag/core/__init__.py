"""
Core retrieval and matching logic for Resume RAG.

Submodules:
- exceptions: Typed errors raised to callers
- matching: Resume-vs-job match scoring
- retrieval: Candidate index, snippets, analytics and the orchestrator
- rag: Answer synthesis over retrieved evidence
"""
