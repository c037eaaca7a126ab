"""
Machine learning modules for Resume RAG.

Submodules:
- providers: Hosted and local AI backends behind one capability interface
- embeddings: Cosine similarity over embedding vectors
- nlp: Snippet extraction and regex fallback extraction
- ethics: PII redaction and role-based views
"""
