from __future__ import annotations

import threading
import time
from typing import Optional

from bitelist.services.errors import ExtractionCancelledError


class CancellationToken:
    """
    Caller-owned cancellation signal with an optional deadline.

    The token is shared between the caller and the extractor: the caller may
    call cancel() from any thread, and every network call made on the
    caller's behalf is bounded by the time left before the deadline.
    """

    def __init__(self, deadline_seconds: Optional[float] = None) -> None:
        self._event = threading.Event()
        self._deadline = (
            time.monotonic() + deadline_seconds if deadline_seconds is not None else None
        )

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self, stage: str) -> None:
        if self.cancelled:
            raise ExtractionCancelledError(stage)
