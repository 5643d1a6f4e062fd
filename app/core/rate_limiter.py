"""
In-memory rate limiter for the auth endpoints.

Sliding window per (limit type, identifier). Counts live in this process,
so each API instance limits independently.
"""

import time
import logging
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass
from threading import Lock

from fastapi import Request

from app.core.config import get_settings
from app.core.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""
    max_requests: int  # Maximum requests allowed
    window_seconds: int  # Time window in seconds


class RateLimiter:
    """Thread-safe in-memory rate limiter using a sliding window."""

    def __init__(self, configs: Optional[Dict[str, RateLimitConfig]] = None):
        self._requests: Dict[str, List[float]] = {}
        self._lock = Lock()
        self._last_sweep = 0.0
        self.configs: Dict[str, RateLimitConfig] = dict(configs or {})

    def _cleanup_old_requests(self, key: str, window_seconds: int, now: float) -> List[float]:
        """Drop timestamps outside the window; keys with none left are removed."""
        cutoff = now - window_seconds
        live = [ts for ts in self._requests.get(key, ()) if ts > cutoff]
        if live:
            self._requests[key] = live
        else:
            self._requests.pop(key, None)
        return live

    def _sweep(self, now: float) -> None:
        """Drop every key whose newest timestamp is older than the longest window."""
        longest = max((c.window_seconds for c in self.configs.values()), default=0)
        if now - self._last_sweep < longest:
            return
        self._last_sweep = now
        cutoff = now - longest
        for key in [k for k, stamps in self._requests.items() if stamps[-1] <= cutoff]:
            del self._requests[key]

    def is_allowed(self, limit_type: str, identifier: str) -> Tuple[bool, int]:
        """
        Check if a request is allowed, recording it when it is.

        Returns:
            Tuple of (is_allowed, retry_after_seconds)
        """
        if limit_type not in self.configs:
            logger.warning(f"Unknown rate limit type: {limit_type}")
            return True, 0

        config = self.configs[limit_type]
        key = f"{limit_type}:{identifier}"

        with self._lock:
            now = time.time()
            self._sweep(now)
            live = self._cleanup_old_requests(key, config.window_seconds, now)

            if len(live) >= config.max_requests:
                retry_after = int(min(live) + config.window_seconds - now) + 1
                return False, max(retry_after, 1)

            live.append(now)
            self._requests[key] = live
            return True, 0

    def tracked_keys(self) -> int:
        """Number of keys currently holding timestamps."""
        with self._lock:
            return len(self._requests)

    def reset(self, limit_type: Optional[str] = None, identifier: Optional[str] = None) -> None:
        """Forget recorded requests for one key, or for everything when called bare."""
        with self._lock:
            if limit_type is None:
                self._requests.clear()
            else:
                self._requests.pop(f"{limit_type}:{identifier}", None)


def _default_configs() -> Dict[str, RateLimitConfig]:
    settings = get_settings()
    return {
        "login_ip": RateLimitConfig(
            max_requests=settings.login_rate_limit,
            window_seconds=settings.login_rate_window_seconds,
        ),
    }


# Global rate limiter instance
rate_limiter = RateLimiter(_default_configs())


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP from the request.

    Forwarding headers are client-controlled unless a proxy rewrites them, so
    they are only read when TRUST_PROXY_HEADERS is set.
    """
    if get_settings().trust_proxy_headers:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()

    if request.client:
        return request.client.host

    return "unknown"


def limit_login(request: Request) -> None:
    """FastAPI dependency: reject the request once the per-IP login budget is spent."""
    client_ip = get_client_ip(request)
    allowed, retry_after = rate_limiter.is_allowed("login_ip", client_ip)
    if not allowed:
        logger.warning(f"Login rate limit exceeded for {client_ip}")
        raise RateLimitExceededError(retry_after)
