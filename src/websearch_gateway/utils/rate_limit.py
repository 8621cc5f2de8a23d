"""Per-client sliding-window rate limiting."""

import time
from collections import deque
from collections.abc import Callable

from websearch_gateway.utils.logging import setup_logger

logger = setup_logger(__name__)


class SlidingWindowRateLimiter:
    """Admit at most ``max_requests`` per client within any trailing window.

    Pure admission check: a rejected request is not queued and does not count
    against the client. Records for clients that went quiet stay in memory
    until ``clear()``.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: dict[str, deque[float]] = {}

    def allow(self, client_id: str) -> bool:
        """Record a request from ``client_id`` if it is under the ceiling.

        Returns:
            True if admitted, False if the client must try again later
        """
        now = self._clock()
        timestamps = self._requests.setdefault(client_id, deque())

        while timestamps and now - timestamps[0] >= self.window_seconds:
            timestamps.popleft()

        if len(timestamps) >= self.max_requests:
            logger.warning(
                "Rate limit exceeded",
                extra={"client_id": client_id, "requests_in_window": len(timestamps)},
            )
            return False

        timestamps.append(now)
        return True

    def clear(self) -> None:
        self._requests.clear()

    def __len__(self) -> int:
        return len(self._requests)
