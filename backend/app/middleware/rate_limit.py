"""
East Village Everything — Login Throttle
==========================================

What:  Per-IP sliding window limit on POST /admin/login attempts.
How:   Each IP gets a list of attempt timestamps. On every attempt, entries
       older than the window are dropped; if the remaining count has reached
       the limit the attempt is refused with RateLimitExceededError (429).
       A successful login clears the IP's history.
Who:   Used as a FastAPI dependency on the login route only; the public and
       admin APIs are not throttled.

Algorithm: Sliding Window Log
    Fixed windows let a client burst twice the limit across a boundary;
    a sliding log always counts the last N seconds.

Limitations:
    State is in process memory, so limits are per worker. Multi-worker
    deployments need a shared store (Redis) instead.
"""

import logging
import time
from collections import defaultdict
from typing import Callable, Dict, List, Optional

from starlette.requests import Request

from app.config import settings
from app.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


class LoginThrottle:
    """
    In-memory sliding window attempt counter.

    Configuration (from settings unless given):
        max_attempts: attempts allowed per window (default: 10)
        window:       window length in seconds (default: 900)
    """

    def __init__(
        self,
        max_attempts: Optional[int] = None,
        window: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.max_attempts = max_attempts or settings.login_rate_limit_attempts
        self.window = window or settings.login_rate_limit_window
        self._clock = clock
        self._attempts: Dict[str, List[float]] = defaultdict(list)

    def hit(self, client_ip: str) -> None:
        """
        Record an attempt from client_ip.

        Raises:
            RateLimitExceededError: the IP already used its attempts this window
        """
        now = self._clock()
        window_start = now - self.window

        self._attempts[client_ip] = [
            ts for ts in self._attempts[client_ip] if ts > window_start
        ]

        if len(self._attempts[client_ip]) >= self.max_attempts:
            oldest = self._attempts[client_ip][0]
            retry_after = int(oldest + self.window - now) + 1
            logger.warning(
                "Login throttled for IP %s: %d attempts in %ds window",
                client_ip,
                len(self._attempts[client_ip]),
                self.window,
            )
            raise RateLimitExceededError(retry_after=retry_after)

        self._attempts[client_ip].append(now)

        # Every 1000th recorded attempt, drop IPs with nothing in the window
        if sum(len(v) for v in self._attempts.values()) % 1000 == 0:
            self._cleanup_inactive_ips(window_start)

    def reset(self, client_ip: str) -> None:
        self._attempts.pop(client_ip, None)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive_ips = [
            ip for ip, timestamps in self._attempts.items()
            if not timestamps or max(timestamps) < window_start
        ]
        for ip in inactive_ips:
            del self._attempts[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))


def client_ip_of(request: Request) -> str:
    # Behind a proxy this is the proxy's address unless uvicorn runs
    # with --proxy-headers
    return getattr(request.client, "host", "unknown") if request.client else "unknown"


login_throttle = LoginThrottle()


async def throttle_login(request: Request) -> str:
    """FastAPI dependency: count this login attempt, return the client IP."""
    client_ip = client_ip_of(request)
    login_throttle.hit(client_ip)
    return client_ip
