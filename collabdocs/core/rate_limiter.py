"""
Rate Limiter - Control AI request frequency per user.

Credits cap how many AI calls a user gets in total; this limiter caps
how fast they can spend them. In-memory only, so each worker process
keeps its own window.
"""
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple
import threading

from collabdocs.core.exceptions import RateLimitExceeded
from collabdocs.core.logging_config import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Simple sliding window rate limiter.

    Tracks requests per identifier (the user id for AI routes) within
    a one-minute window.

    Example:
        >>> limiter = RateLimiter(requests_per_minute=30)
        >>> limiter.is_allowed("user-1")  # (True, 29)
    """

    def __init__(
        self,
        requests_per_minute: int = 30,
        cleanup_interval_minutes: int = 5
    ):
        self.limit = requests_per_minute
        self.window = timedelta(minutes=1)
        self.cleanup_interval = timedelta(minutes=cleanup_interval_minutes)

        self._requests: Dict[str, List[datetime]] = {}
        self._lock = threading.RLock()
        self._last_cleanup = datetime.utcnow()

        logger.info(f"RateLimiter initialized: {requests_per_minute} requests/minute")

    def is_allowed(self, identifier: str) -> Tuple[bool, int]:
        """
        Check if a request is allowed for the given identifier and record it.

        Returns:
            Tuple of (is_allowed, remaining_requests)
        """
        with self._lock:
            self._maybe_cleanup()

            now = datetime.utcnow()
            cutoff = now - self.window

            recent = [t for t in self._requests.get(identifier, []) if t > cutoff]

            if len(recent) >= self.limit:
                self._requests[identifier] = recent
                logger.warning(f"Rate limit exceeded for: {identifier}")
                return False, 0

            recent.append(now)
            self._requests[identifier] = recent
            return True, self.limit - len(recent)

    def check(self, identifier: str) -> int:
        """
        Like is_allowed() but raises RateLimitExceeded when over the limit.

        Returns:
            Remaining requests in the current window
        """
        allowed, remaining = self.is_allowed(identifier)
        if not allowed:
            retry_after = self.get_reset_time(identifier) - datetime.utcnow()
            raise RateLimitExceeded(retry_after=max(1, int(retry_after.total_seconds()) + 1))
        return remaining

    def get_remaining(self, identifier: str) -> int:
        """Get remaining requests for an identifier in the current window."""
        with self._lock:
            cutoff = datetime.utcnow() - self.window
            recent = [t for t in self._requests.get(identifier, []) if t > cutoff]
            return max(0, self.limit - len(recent))

    def get_reset_time(self, identifier: str) -> datetime:
        """Get when the oldest request in the window expires."""
        with self._lock:
            if not self._requests.get(identifier):
                return datetime.utcnow()
            return min(self._requests[identifier]) + self.window

    def reset(self, identifier: Optional[str] = None) -> None:
        """Forget recorded requests for one identifier, or for everyone."""
        with self._lock:
            if identifier is None:
                self._requests.clear()
            else:
                self._requests.pop(identifier, None)

    def _maybe_cleanup(self) -> None:
        """Remove old entries periodically."""
        now = datetime.utcnow()

        if now - self._last_cleanup < self.cleanup_interval:
            return

        cutoff = now - self.window

        for identifier in list(self._requests.keys()):
            self._requests[identifier] = [
                t for t in self._requests[identifier] if t > cutoff
            ]
            if not self._requests[identifier]:
                del self._requests[identifier]

        self._last_cleanup = now
        logger.debug(f"Rate limiter cleanup: {len(self._requests)} active users")


# Global rate limiter instance
_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get or create the global rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        from collabdocs.core.config import get_settings
        _rate_limiter = RateLimiter(
            requests_per_minute=get_settings().rate_limit_per_minute
        )
    return _rate_limiter
