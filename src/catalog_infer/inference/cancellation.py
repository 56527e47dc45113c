import threading
import time
from typing import Optional

from catalog_infer.utils.exceptions import CancelledError, DeadlineExceededError


CANCELLED = "cancelled"
DEADLINE_EXCEEDED = "deadline_exceeded"


class CancellationToken:
    """
    Caller-owned cancellation signal polled by the inference engines.

    Terminal causes:
    - cancelled          (cancel() was called)
    - deadline_exceeded  (monotonic deadline passed)
    """

    def __init__(self, deadline: Optional[float] = None):
        self._deadline = deadline
        self._lock = threading.Lock()
        self._cause: Optional[str] = None

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancellationToken":
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def cancel(self) -> None:
        with self._lock:
            if self._cause is None:
                self._cause = CANCELLED

    @property
    def cause(self) -> Optional[str]:
        with self._lock:
            if self._cause is None and self._deadline is not None:
                if time.monotonic() >= self._deadline:
                    self._cause = DEADLINE_EXCEEDED
            return self._cause

    def done(self) -> bool:
        return self.cause is not None

    def raise_if_done(self) -> None:
        cause = self.cause
        if cause == CANCELLED:
            raise CancelledError()
        if cause == DEADLINE_EXCEEDED:
            raise DeadlineExceededError()


def check_token(token: Optional[CancellationToken]) -> None:
    if token is not None:
        token.raise_if_done()
