from abc import ABC, abstractmethod
from typing import Generic, Sequence, TypeVar

from cursor_stream.extract.cancellation import CancellationToken

TDocument = TypeVar("TDocument")


class BatchCursor(ABC, Generic[TDocument]):
    """
    Blocking cursor that delivers query results one batch at a time.

    Implementations own their network I/O and batching policy. Consumers
    must only read `current_batch` right after `advance` returned True.
    """

    @abstractmethod
    def advance(self, cancellation_token: CancellationToken) -> bool:
        """
        Moves to the next batch.

        Returns:
            True if a new batch is now current, False once iteration is finished.
        """

    @property
    @abstractmethod
    def current_batch(self) -> Sequence[TDocument]:
        """Documents of the batch made current by the last successful advance."""


class AsyncBatchCursor(ABC, Generic[TDocument]):
    """Awaitable counterpart of `BatchCursor` with the same contract."""

    @abstractmethod
    async def advance(self, cancellation_token: CancellationToken) -> bool:
        """Moves to the next batch without blocking the event loop."""

    @property
    @abstractmethod
    def current_batch(self) -> Sequence[TDocument]:
        """Documents of the batch made current by the last successful advance."""
