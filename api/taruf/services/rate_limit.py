"""Process-local throttling for the unauthenticated login endpoints."""

import logging
import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request

from .. import config

logger = logging.getLogger(__name__)


@dataclass
class RateDecision:
    allowed: bool
    remaining: int
    retry_after_seconds: int = 0


class SlidingWindowLimiter:
    def __init__(self) -> None:
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, key: str, limit: int, window_seconds: int) -> RateDecision:
        now = time.monotonic()
        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= now - window_seconds:
                hits.popleft()
            if len(hits) >= limit:
                wait = max(1, int(hits[0] + window_seconds - now))
                return RateDecision(allowed=False, remaining=0, retry_after_seconds=wait)
            hits.append(now)
            return RateDecision(allowed=True, remaining=limit - len(hits))

    def reset(self, route_key: str | None = None) -> None:
        with self._lock:
            if route_key is None:
                self._hits.clear()
                return
            for key in [k for k in self._hits if k.startswith(f"{route_key}:")]:
                del self._hits[key]


limiter = SlidingWindowLimiter()


def _client_address(request: Request) -> str:
    # First hop when running behind the reverse proxy.
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client and request.client.host else "unknown"


def rate_limit_dependency(route_key: str, limit_setting: str):
    """Throttle a route per client address; the limit is read from ``config`` on each request."""

    def _throttle(request: Request) -> None:
        limit = int(getattr(config, limit_setting))
        client = _client_address(request)
        decision = limiter.hit(f"{route_key}:{client}", limit, config.RL_WINDOW_SECONDS)
        if decision.allowed:
            return
        logger.warning("[rate_limit] route=%s client=%s blocked for %ss", route_key, client, decision.retry_after_seconds)
        raise HTTPException(
            status_code=429,
            detail=f"Too many attempts. Try again in {decision.retry_after_seconds}s",
            headers={"Retry-After": str(decision.retry_after_seconds)},
        )

    return Depends(_throttle)
