"""
Adapters that flatten a batch cursor into a stream of single documents.

Both adapters pull lazily: the cursor is advanced only when the consumer asks
for a document and the current batch has nothing left. The cursor is driven,
never closed; closing it stays with whoever opened it.
"""
from enum import Enum
from typing import (
    AsyncIterable,
    Generic,
    Iterable,
    List,
    Optional,
    Sequence,
    TypeVar,
    Union,
)

from cursor_stream.extract.batch_cursor import AsyncBatchCursor, BatchCursor
from cursor_stream.extract.cancellation import CancellationToken

TDocument = TypeVar("TDocument")


class StreamState(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    ADVANCING_BATCH = "advancing_batch"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


_TERMINAL_STATES = (StreamState.EXHAUSTED, StreamState.FAILED)


class _StreamBase(Generic[TDocument]):
    """Resumable position shared by the sync and async streams."""

    def __init__(
        self,
        cursor: Union[BatchCursor[TDocument], AsyncBatchCursor[TDocument]],
        cancellation_token: Optional[CancellationToken],
    ):
        self._cursor = cursor
        self._cancellation_token = (
            cancellation_token if cancellation_token is not None else CancellationToken.NONE
        )
        self._batch: Sequence[TDocument] = ()
        self._index = 0
        self._state = StreamState.NOT_STARTED

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def cancellation_token(self) -> CancellationToken:
        return self._cancellation_token

    def _has_pending(self) -> bool:
        return self._index < len(self._batch)

    def _take(self) -> TDocument:
        document = self._batch[self._index]
        self._index += 1
        self._state = StreamState.ACTIVE
        return document

    def _load_current_batch(self) -> None:
        self._batch = self._cursor.current_batch
        self._index = 0

    def _finish(self, state: StreamState) -> None:
        # Terminal: drop the batch and the cursor so nothing can touch them again
        self._state = state
        self._batch = ()
        self._index = 0
        self._cursor = None


class CursorDocumentStream(_StreamBase[TDocument]):
    """
    Async iterator over every document an `AsyncBatchCursor` returns.

    Documents come out in batch arrival order, each batch in its own order.
    Empty batches are skipped. A failure while advancing is raised to the
    consumer as-is and ends the stream; an exhausted or failed stream stays
    empty and never calls the cursor again.
    """

    def __init__(
        self,
        cursor: AsyncBatchCursor[TDocument],
        cancellation_token: Optional[CancellationToken] = None,
    ):
        super().__init__(cursor, cancellation_token)

    def __aiter__(self) -> "CursorDocumentStream[TDocument]":
        return self

    async def __anext__(self) -> TDocument:
        if self._state in _TERMINAL_STATES:
            raise StopAsyncIteration

        while not self._has_pending():
            self._state = StreamState.ADVANCING_BATCH
            try:
                has_batch = await self._cursor.advance(self._cancellation_token)
                if has_batch:
                    self._load_current_batch()
            except BaseException:
                self._finish(StreamState.FAILED)
                raise

            if not has_batch:
                self._finish(StreamState.EXHAUSTED)
                raise StopAsyncIteration

        return self._take()


class CursorDocumentIterator(_StreamBase[TDocument]):
    """Blocking counterpart of `CursorDocumentStream` over a `BatchCursor`."""

    def __init__(
        self,
        cursor: BatchCursor[TDocument],
        cancellation_token: Optional[CancellationToken] = None,
    ):
        super().__init__(cursor, cancellation_token)

    def __iter__(self) -> "CursorDocumentIterator[TDocument]":
        return self

    def __next__(self) -> TDocument:
        if self._state in _TERMINAL_STATES:
            raise StopIteration

        while not self._has_pending():
            self._state = StreamState.ADVANCING_BATCH
            try:
                has_batch = self._cursor.advance(self._cancellation_token)
                if has_batch:
                    self._load_current_batch()
            except BaseException:
                self._finish(StreamState.FAILED)
                raise

            if not has_batch:
                self._finish(StreamState.EXHAUSTED)
                raise StopIteration

        return self._take()


def to_async_iterable(
    source: AsyncBatchCursor[TDocument],
    cancellation_token: Optional[CancellationToken] = None,
) -> CursorDocumentStream[TDocument]:
    """
    Provides asynchronous iteration over all documents returned by `source`.

    Args:
        source: The cursor to drive. It is advanced but never closed.
        cancellation_token: Forwarded to every `advance` call. Defaults to
            `CancellationToken.NONE`.

    Returns:
        A single-pass async iterator over the flattened batches.
    """
    return CursorDocumentStream(source, cancellation_token)


def to_iterable(
    source: BatchCursor[TDocument],
    cancellation_token: Optional[CancellationToken] = None,
) -> CursorDocumentIterator[TDocument]:
    """Blocking variant of `to_async_iterable`."""
    return CursorDocumentIterator(source, cancellation_token)


async def to_list(source: AsyncIterable[TDocument]) -> List[TDocument]:
    """Drains an async iterable into a list."""
    return [document async for document in source]


def to_list_sync(source: Iterable[TDocument]) -> List[TDocument]:
    return list(source)
