import logging
import time
import threading
from collections import OrderedDict
from typing import Callable, Optional

import redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class DeliveryLedger:
    """
    Remembers which webhook deliveries were already reconciled so gateway
    retries can be acknowledged without touching the order store.

    This is a shortcut, not a guarantee: the store's conditional update
    already makes re-delivery harmless. A key is only recorded after the
    delivery was fully handled.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl: int = 86400,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.clock = clock
        self.redis = None
        self.redis_available = False

        # 1. Primary Memory (Redis)
        if redis_url:
            try:
                self.redis = redis.from_url(
                    redis_url,
                    decode_responses=True,
                    socket_connect_timeout=1  # Fail fast if Redis is down
                )
                self.redis.ping()
                self.redis_available = True
                logger.info("✅ DeliveryLedger: Connected to Redis.")
            except (RedisError, ValueError) as e:
                logger.warning(f"⚠️ DeliveryLedger: Redis unreachable ({e}). Using RAM fallback.")
        else:
            logger.info("DeliveryLedger: REDIS_URL not set. Using RAM.")

        # 2. Fallback Memory (RAM): key -> expiry timestamp, oldest expiry first
        self._memory_store = OrderedDict()
        self._memory_lock = threading.Lock()

    @staticmethod
    def key_for(event: str, reference: str) -> str:
        return f"paystack:delivery:{event}:{reference}"

    def seen(self, key: str) -> bool:
        if self.redis_available:
            try:
                return bool(self.redis.exists(key))
            except RedisError as e:
                self._handle_redis_error(e)

        with self._memory_lock:
            expires_at = self._memory_store.get(key)
            if expires_at is None:
                return False
            if expires_at <= self.clock():
                self._memory_store.pop(key, None)
                return False
            return True

    def record(self, key: str) -> None:
        if self.redis_available:
            try:
                self.redis.setex(key, self.ttl, "1")
            except RedisError as e:
                self._handle_redis_error(e)

        # Always write to RAM as well, in case Redis drops out later
        with self._memory_lock:
            now = self.clock()
            self._purge_expired(now)
            self._memory_store[key] = now + self.ttl
            self._memory_store.move_to_end(key)

    def _purge_expired(self, now: float) -> None:
        # Every entry shares one TTL, so expiries follow insertion order
        while self._memory_store:
            oldest_key, expires_at = next(iter(self._memory_store.items()))
            if expires_at > now:
                break
            del self._memory_store[oldest_key]

    def _handle_redis_error(self, e):
        """Log error and stop trying Redis for this process."""
        logger.error(f"❌ Redis Error: {e}. Switching to RAM mode.")
        self.redis_available = False
