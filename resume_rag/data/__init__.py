"""
Data layer for Resume RAG.

Submodules:
- database: MongoDB connection management
- models: Pydantic document, filter and response models
- store: Document store abstraction (in-memory and MongoDB)
"""

from .database import DatabaseManager, build_mongo_uri, get_database_manager

__all__ = [
    "DatabaseManager",
    "build_mongo_uri",
    "get_database_manager",
]
