"""
MongoDB connection management for Resume RAG.

One lazily created PyMongo client per process, shared by the MongoDB
document store and the CLI. The in-memory store never touches this module.
"""

from typing import Any, Optional
from urllib.parse import quote_plus

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from resume_rag.utils.config import DatabaseSettings, get_settings
from resume_rag.utils.logger import get_logger

logger = get_logger(__name__)

# Characters never valid in a host name; rejected to keep the URI well-formed
_FORBIDDEN_HOST_CHARS = frozenset(";&|$`/@")


def build_mongo_uri(db_settings: DatabaseSettings) -> str:
    """
    Build the connection URI from settings.

    Credentials are URL-encoded so that passwords containing ``@`` or
    ``:`` do not corrupt the URI.

    Raises:
        ValueError: The host is empty or contains URI control characters.
    """
    host = db_settings.host.strip()
    if not host or any(c in _FORBIDDEN_HOST_CHARS for c in host):
        raise ValueError(f"Invalid database host: {host!r}")

    auth = ""
    if db_settings.username and db_settings.password:
        auth = f"{quote_plus(db_settings.username)}:{quote_plus(db_settings.password)}@"

    return f"mongodb://{auth}{host}:{db_settings.port}"


class DatabaseManager:
    """Owns the process-wide MongoDB client."""

    def __init__(self, db_settings: Optional[DatabaseSettings] = None) -> None:
        self._settings = db_settings or get_settings().database
        self._uri = build_mongo_uri(self._settings)
        self._client: Optional[MongoClient] = None

    @property
    def client(self) -> MongoClient:
        """Client created on first use; connection errors surface on the first query."""
        if self._client is None:
            logger.info(f"Connecting to MongoDB at {self._settings.host}:{self._settings.port}")
            self._client = MongoClient(
                self._uri,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000,
                maxPoolSize=50,
            )
        return self._client

    @property
    def database(self) -> Database:
        return self.client[self._settings.name]

    def get_sync_collection(self, collection_name: str) -> Any:
        """Get a collection of the configured database."""
        return self.database[collection_name]

    def check_sync_connection(self) -> bool:
        """Ping the server; drops the client on failure so the next call reconnects."""
        try:
            self.client.admin.command("ping")
            return True
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(f"MongoDB connection check failed: {e}")
            self.close()
            return False

    def ensure_indexes(self) -> None:
        """Create the single-field indexes backing the structural filters."""
        from resume_rag.data.models import Job, Resume

        for collection_name, model in (
            (self._settings.resumes_collection, Resume),
            (self._settings.jobs_collection, Job),
        ):
            collection = self.get_sync_collection(collection_name)
            for field_name in model.Settings.indexes:
                collection.create_index([(field_name, ASCENDING)])
            logger.info(f"Indexes ensured on '{collection_name}': {', '.join(model.Settings.indexes)}")

    def close(self) -> None:
        if self._client is not None:
            logger.info("Closing MongoDB client")
            self._client.close()
            self._client = None


_db_manager: Optional[DatabaseManager] = None


def get_database_manager() -> DatabaseManager:
    """Get the global database manager instance."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager
