"""
Fixed-window rate limiting kept in process memory.

Counters live in the limiter instance, so limits only hold per process. That is
enough to deter abuse of a single server but is not a quota across instances.
"""

import logging
import math
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict

from fastapi import HTTPException, Request, status

from src.shared import config


@dataclass
class RateLimitRecord:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """Allow ``max_requests`` per key in each ``window_seconds`` window."""

    def __init__(self, max_requests: int, window_seconds: float,
                 clock: Callable[[], float] = time.monotonic):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._records: Dict[str, RateLimitRecord] = {}
        self._next_sweep = 0.0
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _sweep(self, now: float) -> None:
        # Caller holds the lock; runs at most once per window
        if now < self._next_sweep:
            return
        expired = [key for key, record in self._records.items() if now > record.reset_at]
        for key in expired:
            del self._records[key]
        if expired:
            logging.debug(f"Pruned {len(expired)} expired rate limit records")
        self._next_sweep = now + self.window_seconds

    def allow(self, key: str) -> bool:
        """Record a request for ``key`` and report whether it is within the limit."""
        now = self._clock()
        with self._lock:
            self._sweep(now)
            record = self._records.get(key)
            if record is None or now > record.reset_at:
                self._records[key] = RateLimitRecord(count=1, reset_at=now + self.window_seconds)
                return True
            if record.count >= self.max_requests:
                return False
            record.count += 1
            return True

    def retry_after(self, key: str) -> int:
        """Whole seconds until ``key``'s window resets (0 if it has no open window)."""
        now = self._clock()
        with self._lock:
            record = self._records.get(key)
            if record is None or now > record.reset_at:
                return 0
            return max(1, math.ceil(record.reset_at - now))

    def reset(self, key: str = None) -> None:
        with self._lock:
            if key is None:
                self._records.clear()
            else:
                self._records.pop(key, None)


@dataclass
class RateLimiters:
    """The limiters one application process owns."""
    waitlist: FixedWindowRateLimiter
    admin_login: FixedWindowRateLimiter
    admin_data: FixedWindowRateLimiter

    @classmethod
    def from_config(cls) -> "RateLimiters":
        return cls(
            waitlist=FixedWindowRateLimiter(config.WAITLIST_RATE_LIMIT_MAX, config.WAITLIST_RATE_LIMIT_WINDOW),
            admin_login=FixedWindowRateLimiter(config.ADMIN_LOGIN_RATE_LIMIT_MAX,
                                               config.ADMIN_LOGIN_RATE_LIMIT_WINDOW),
            admin_data=FixedWindowRateLimiter(config.ADMIN_DATA_RATE_LIMIT_MAX, config.ADMIN_DATA_RATE_LIMIT_WINDOW),
        )


def get_client_ip(request: Request) -> str:
    """Get client IP address for rate limiting."""
    # Check for forwarded IP (from proxy/load balancer)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Take the first IP in the chain
        return forwarded.split(",")[0].strip()
    # Fallback to direct connection
    return request.client.host if request.client else "unknown"


def get_rate_limiters(request: Request) -> RateLimiters:
    """Dependency returning the limiters owned by the running application."""
    return request.app.state.rate_limiters


def enforce_rate_limit(limiter: FixedWindowRateLimiter, client_ip: str, scope: str,
                       message: str = "Too many requests. Please try again later.") -> None:
    """
    Count a request against ``limiter`` and reject it once the window is spent.

    Raises:
        HTTPException 429 with ``{"error", "retryAfter"}`` and a Retry-After header
    """
    if limiter.allow(client_ip):
        return
    retry_after = limiter.retry_after(client_ip)
    logging.warning(f"{scope} rate limit exceeded for IP: {client_ip}")
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail={"error": message, "retryAfter": retry_after},
        headers={"Retry-After": str(retry_after)},
    )
