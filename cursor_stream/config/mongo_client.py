import logging
from typing import Optional

from pymongo import AsyncMongoClient, MongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from cursor_stream.config import settings

logger = logging.getLogger(__name__)


def _mask_uri(uri: str) -> str:
    # Hide credentials, keep host part for diagnostics
    return uri.split("@")[1] if "@" in uri else uri


class StreamMongoClient:
    """
    Wrapper for MongoDB connection handling.
    Holds one blocking and one asyncio client against the same deployment;
    each connects lazily on first use.
    """

    def __init__(self, uri: Optional[str] = None, db_name: Optional[str] = None):
        self._uri = uri if uri is not None else settings.MONGO_URI
        self._db_name = db_name or settings.MONGO_DB_NAME

        self._client: Optional[MongoClient] = None
        self._async_client: Optional[AsyncMongoClient] = None

    def _require_uri(self) -> str:
        if not self._uri:
            raise ValueError("MONGO_URI environment variable is not set.")
        return self._uri

    def connect(self) -> None:
        """
        Establishes the blocking connection.
        Raises specific errors for connection failures to halt jobs immediately.
        """
        uri = self._require_uri()
        logger.info(f"🔌 Connecting to {_mask_uri(uri)} (db={self._db_name})")

        try:
            # Connect with a timeout to fail fast if DB is unreachable
            self._client = MongoClient(
                uri,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000
            )
            self._client.admin.command("ping")
            logger.info("✅ Connected to MongoDB successfully.")

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.critical(f"❌ Failed to connect to MongoDB: {e}")
            raise

    async def connect_async(self) -> None:
        """Establishes the asyncio connection."""
        uri = self._require_uri()
        logger.info(f"🔌 Connecting (async) to {_mask_uri(uri)} (db={self._db_name})")

        try:
            self._async_client = AsyncMongoClient(
                uri,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000
            )
            await self._async_client.admin.command("ping")
            logger.info("✅ Connected to MongoDB successfully (async).")

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.critical(f"❌ Failed to connect to MongoDB: {e}")
            raise

    def get_db(self) -> Database:
        if not self._client:
            self.connect()
        return self._client.get_database(self._db_name)

    async def get_async_db(self) -> AsyncDatabase:
        if not self._async_client:
            await self.connect_async()
        return self._async_client.get_database(self._db_name)

    def close(self) -> None:
        """Closes the blocking connection."""
        if self._client:
            self._client.close()
            self._client = None
            logger.info("MongoDB connection closed.")

    async def aclose(self) -> None:
        """Closes the asyncio connection."""
        if self._async_client:
            await self._async_client.close()
            self._async_client = None
            logger.info("MongoDB async connection closed.")


# Singleton instance for easy import across modules
mongo_client = StreamMongoClient()
