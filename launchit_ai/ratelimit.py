"""Per-client fixed-window request limiter for the HTTP layer."""

from __future__ import annotations

import time
from typing import Callable, Dict, Tuple


class RateLimiter:
    """
    Allow at most ``max_requests`` per ``window_seconds`` for each client id.

    The window starts at a client's first request and resets once it has
    elapsed. Expired windows are swept at most once per window so the
    registry only holds clients seen recently. State is in-process only.
    """

    def __init__(
        self,
        max_requests: int = 50,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._clients: Dict[str, Tuple[int, float]] = {}
        self._next_sweep = clock() + window_seconds

    def allow(self, client_id: str) -> bool:
        now = self._clock()
        if now >= self._next_sweep:
            self._sweep(now)
        entry = self._clients.get(client_id)
        if entry is None or now > entry[1]:
            self._clients[client_id] = (1, now + self.window_seconds)
            return True
        count, reset_at = entry
        if count >= self.max_requests:
            return False
        self._clients[client_id] = (count + 1, reset_at)
        return True

    def _sweep(self, now: float) -> None:
        self._clients = {
            client_id: entry
            for client_id, entry in self._clients.items()
            if now <= entry[1]
        }
        self._next_sweep = now + self.window_seconds

    def reset(self) -> None:
        self._clients.clear()
