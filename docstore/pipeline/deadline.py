"""
Request-scoped deadline for the write path.

Checked before every I/O step. Object-store calls run through ``call`` so a
slow call is abandoned once the deadline fires; database statements are
bounded by the unit of work (see ``docstore.database.begin``).
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable, Optional, TypeVar

from docstore.errors import DeadlineExceeded

logger = logging.getLogger(__name__)

T = TypeVar("T")

# abandoned calls keep their worker until the underlying client gives up
_executor = ThreadPoolExecutor(max_workers=16, thread_name_prefix="docstore-io")


class Deadline:
    def __init__(self, timeout_seconds: Optional[float] = None, clock=time.monotonic):
        self._clock = clock
        self._expires = None if timeout_seconds is None else clock() + timeout_seconds

    @classmethod
    def none(cls) -> "Deadline":
        return cls(None)

    def remaining(self) -> Optional[float]:
        if self._expires is None:
            return None
        return max(0.0, self._expires - self._clock())

    def expired(self) -> bool:
        return self._expires is not None and self._clock() >= self._expires

    def check(self, step: str) -> None:
        if self.expired():
            logger.error("deadline exceeded before step '%s'", step)
            raise DeadlineExceeded(step)

    def call(self, step: str, fn: Callable[..., T], *args, **kwargs) -> T:
        """Run ``fn`` and give up waiting for it once the deadline fires."""
        self.check(step)
        remaining = self.remaining()
        if remaining is None:
            return fn(*args, **kwargs)

        future = _executor.submit(fn, *args, **kwargs)
        try:
            return future.result(timeout=remaining)
        except FutureTimeout:
            future.cancel()
            logger.error("deadline exceeded during step '%s', abandoning the call", step)
            raise DeadlineExceeded(step, f"request deadline exceeded during '{step}'") from None
