"""
Rate limiting for listener interactions

Play and like events are throttled per client IP. The store is an object
handed to the Flask app (app.config['rate_limiter']) rather than module
state, so tests get a fresh one and a shared backend (e.g. Redis) can be
swapped in for multi-instance deployments by implementing RateLimitStore.

Keys are arbitrary strings, e.g. 'interaction:203.0.113.7'.
"""

import time
import logging
import threading

logger = logging.getLogger(__name__)


class RateLimitStore:
    """Interface for rate-limit backends"""

    def hit(self, key, window_seconds):
        """Record an attempt for key

        Args:
            key: Rate-limit key
            window_seconds: Cooldown window in seconds

        Returns:
            True if the attempt is rate limited (not recorded),
            False if it is allowed (and recorded)
        """
        raise NotImplementedError

    def reset(self, key):
        """Forget any recorded attempt for key"""
        raise NotImplementedError

    def prune(self):
        """Drop expired entries

        Returns:
            int: Number of entries removed
        """
        return 0


class InMemoryRateLimitStore(RateLimitStore):
    """Process-local rate-limit store

    Keeps the last allowed attempt per key together with the window it was
    recorded under. Entries are dropped by prune() once their window has
    passed. State does not survive restarts and is not shared between
    processes.

    Attributes:
        clock: Callable returning seconds (monotonic by default)
    """

    def __init__(self, clock=None):
        self.clock = clock or time.monotonic
        self._entries = {}  # key -> (last_hit, window_seconds)
        self._lock = threading.Lock()

    def hit(self, key, window_seconds):
        now = self.clock()

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                last_hit, _ = entry
                if now - last_hit < window_seconds:
                    logger.debug(f"Rate limited: {key} ({now - last_hit:.1f}s < {window_seconds}s)")
                    return True

            self._entries[key] = (now, window_seconds)
            return False

    def reset(self, key):
        with self._lock:
            self._entries.pop(key, None)

    def prune(self):
        now = self.clock()

        with self._lock:
            expired = [
                key for key, (last_hit, window_seconds) in self._entries.items()
                if now - last_hit >= window_seconds
            ]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug(f"Pruned {len(expired)} expired rate-limit entries")
        return len(expired)

    def __len__(self):
        with self._lock:
            return len(self._entries)


def interaction_key(ip_address):
    """Build the rate-limit key for play/like events from one client"""
    return f"interaction:{ip_address}"
