from __future__ import annotations

import threading
import time
from typing import Any, Dict, Optional

from .errors import OperationCancelledError


class OperationContext:
    """Deadline and cancellation signal carried by one injection call.

    Every API round-trip goes through `request_kwargs`, which refuses to
    start once the context is done and otherwise hands the remaining time
    to the Kubernetes client as its request timeout.
    """

    def __init__(self, deadline: Optional[float] = None) -> None:
        # time.monotonic() based
        self._deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def with_timeout(cls, seconds: float) -> "OperationContext":
        return cls(deadline=time.monotonic() + float(seconds))

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def remaining(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return self._deadline - time.monotonic()

    def ensure_active(self, operation: str) -> None:
        if self._cancelled.is_set():
            raise OperationCancelledError(operation, "context canceled")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise OperationCancelledError(operation, "context deadline exceeded")

    def request_kwargs(self, operation: str) -> Dict[str, Any]:
        self.ensure_active(operation)
        remaining = self.remaining()
        if remaining is None:
            return {}
        # (connect, read); the client ignores a bare float
        return {"_request_timeout": (remaining, remaining)}
