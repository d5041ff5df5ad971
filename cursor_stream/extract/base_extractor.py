from abc import ABC, abstractmethod
from contextlib import asynccontextmanager, contextmanager
from typing import (
    Any,
    AsyncContextManager,
    AsyncIterator,
    ContextManager,
    Dict,
    Iterator,
    Optional,
    Union,
)

from pymongo.asynchronous.database import AsyncDatabase
from pymongo.database import Database

from cursor_stream.config.settings import CURSOR_BATCH_SIZE
from cursor_stream.extract.async_enumerable import (
    CursorDocumentIterator,
    CursorDocumentStream,
    to_async_iterable,
    to_iterable,
)
from cursor_stream.extract.cancellation import CancellationToken
from cursor_stream.extract.mongo_cursor import AsyncMongoBatchCursor, MongoBatchCursor


class BaseExtractor(ABC):
    """
    Abstract Base Class for extracting documents from a source database.
    Enforces a standard interface for all extraction adapters.
    """

    def __init__(self, db: Union[Database, AsyncDatabase]):
        """
        Initialize with a database connection.

        Args:
            db: The source database handle (Read-Only).
        """
        self.db = db

    @abstractmethod
    def fetch_documents(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        projection: Optional[Dict[str, int]] = None,
        batch_size: int = CURSOR_BATCH_SIZE,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Union[ContextManager[Iterator[Dict[str, Any]]], AsyncContextManager[AsyncIterator[Dict[str, Any]]]]:
        """
        Opens a cursor and streams its documents, one at a time.

        The document stream is handed out by a context manager; leaving the
        block closes the server cursor, also after an early break or an error.

        Args:
            collection: Name of the collection to read from.
            query: MongoDB filter dictionary. None matches every document.
            projection: Fields to include/exclude (0 or 1).
            batch_size: Number of documents fetched per cursor batch.
            cancellation_token: Checked by the cursor before each batch.
        """


class MongoExtractor(BaseExtractor):
    """Blocking extraction over a pymongo `Database`."""

    def open_cursor(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        projection: Optional[Dict[str, int]] = None,
        batch_size: int = CURSOR_BATCH_SIZE,
    ) -> MongoBatchCursor:
        if query is None:
            query = {}

        cursor = self.db[collection].find(query, projection).batch_size(batch_size)
        return MongoBatchCursor(cursor, batch_size)

    @contextmanager
    def fetch_documents(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        projection: Optional[Dict[str, int]] = None,
        batch_size: int = CURSOR_BATCH_SIZE,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Iterator[CursorDocumentIterator[Dict[str, Any]]]:
        cursor = self.open_cursor(collection, query, projection, batch_size)
        try:
            yield to_iterable(cursor, cancellation_token)
        finally:
            cursor.close()


class AsyncMongoExtractor(BaseExtractor):
    """Extraction over a pymongo `AsyncDatabase`; documents are awaited lazily."""

    def open_cursor(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        projection: Optional[Dict[str, int]] = None,
        batch_size: int = CURSOR_BATCH_SIZE,
    ) -> AsyncMongoBatchCursor:
        if query is None:
            query = {}

        # find() on an async collection is not a coroutine; only fetching awaits
        cursor = self.db[collection].find(query, projection).batch_size(batch_size)
        return AsyncMongoBatchCursor(cursor, batch_size)

    @asynccontextmanager
    async def fetch_documents(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        projection: Optional[Dict[str, int]] = None,
        batch_size: int = CURSOR_BATCH_SIZE,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> AsyncIterator[CursorDocumentStream[Dict[str, Any]]]:
        cursor = self.open_cursor(collection, query, projection, batch_size)
        try:
            yield to_async_iterable(cursor, cancellation_token)
        finally:
            await cursor.close()
