"""Call context carrying cancellation and deadlines to key store calls."""

import threading
import time
from typing import Optional

from kms_jwks_manager.exceptions import OperationCancelledError


class CallContext:
    """Cancellation flag plus optional deadline shared by one run.

    A single context is created at the entry point and passed to every
    key store call made during a rotation or export. It is checked before
    each call and does not interrupt a call already in flight.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        """Initialize the context.

        Args:
            timeout: Seconds until the deadline; None for no deadline
        """
        if timeout is not None and timeout < 0:
            raise ValueError("timeout must be non-negative")
        self._cancelled = threading.Event()
        self._deadline = None if timeout is None else time.monotonic() + timeout

    @classmethod
    def background(cls) -> "CallContext":
        """Return a context that never expires."""
        return cls()

    def cancel(self) -> None:
        """Cancel every subsequent call made with this context."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self, operation: str, resource: str) -> None:
        """Raise if the context is cancelled or expired.

        Raises:
            OperationCancelledError: If no further calls may be issued
        """
        if self._cancelled.is_set():
            raise OperationCancelledError(operation, resource, "operation cancelled")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise OperationCancelledError(operation, resource, "deadline exceeded")
