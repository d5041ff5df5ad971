import logging
from typing import Any, Dict, List, Optional

from pymongo.errors import InvalidOperation

from cursor_stream.extract.batch_cursor import AsyncBatchCursor, BatchCursor
from cursor_stream.extract.cancellation import CancellationToken

logger = logging.getLogger(__name__)


class _MongoBatchState:
    """
    Batch bookkeeping shared by the sync and async pymongo wrappers.

    The driver hides its wire batches, so a batch here is whatever
    `to_list(batch_size)` returns: up to `batch_size` documents, and an
    empty read means the server cursor is exhausted.
    """

    def __init__(self, cursor, batch_size: int):
        if batch_size < 1:
            raise ValueError(f"batch_size must be a positive integer, got {batch_size}")
        self._cursor = cursor
        self._batch_size = batch_size
        self._batch: Optional[List[Dict[str, Any]]] = None
        self._finished = False
        self._batches_read = 0

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def batches_read(self) -> int:
        return self._batches_read

    @property
    def current_batch(self) -> List[Dict[str, Any]]:
        if self._batch is None:
            raise InvalidOperation(
                "No current batch: advance() has not returned True or the cursor is exhausted."
            )
        return self._batch

    def _store(self, documents: List[Dict[str, Any]]) -> bool:
        if not documents:
            self._batch = None
            self._finished = True
            logger.debug(f"Cursor exhausted after {self._batches_read} batches.")
            return False

        self._batch = documents
        self._batches_read += 1
        logger.debug(f"Fetched batch #{self._batches_read} with {len(documents)} documents.")
        return True


class MongoBatchCursor(_MongoBatchState, BatchCursor[Dict[str, Any]]):
    """Batch view over a pymongo `Cursor` or `CommandCursor`."""

    def advance(self, cancellation_token: CancellationToken) -> bool:
        if self._finished:
            return False
        cancellation_token.raise_if_cancellation_requested()
        self._batch = None
        return self._store(self._cursor.to_list(self._batch_size))

    def close(self) -> None:
        self._cursor.close()


class AsyncMongoBatchCursor(_MongoBatchState, AsyncBatchCursor[Dict[str, Any]]):
    """Batch view over a pymongo `AsyncCursor` or `AsyncCommandCursor`."""

    async def advance(self, cancellation_token: CancellationToken) -> bool:
        if self._finished:
            return False
        cancellation_token.raise_if_cancellation_requested()
        self._batch = None
        return self._store(await self._cursor.to_list(self._batch_size))

    async def close(self) -> None:
        await self._cursor.close()
