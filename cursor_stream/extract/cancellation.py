import threading


class OperationCancelledError(Exception):
    """Raised by a cursor when it observes a cancelled token."""


class CancellationToken:
    """
    Caller-owned cancellation signal.

    The token is only ever observed by cursors at their suspension points
    (the advance call). Stream adapters forward it untouched.
    """

    NONE: "CancellationToken"

    def __init__(self, can_be_cancelled: bool = True):
        self._event = threading.Event()
        self._can_be_cancelled = can_be_cancelled

    @property
    def can_be_cancelled(self) -> bool:
        return self._can_be_cancelled

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        if not self._can_be_cancelled:
            raise ValueError("The default token cannot be cancelled.")
        self._event.set()

    def raise_if_cancellation_requested(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("The operation was cancelled.")

    def __repr__(self) -> str:
        state = "cancelled" if self.is_cancellation_requested else "active"
        return f"<CancellationToken {state}>"


# Shared token for callers that do not supply one
CancellationToken.NONE = CancellationToken(can_be_cancelled=False)
