import math
from dataclasses import dataclass

from common.cache.key_value_store import KeyValueStore
from common.enum.error_code import APIError
from common.exception.exceptions import BusinessError


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_after: float

    @property
    def retry_after(self) -> int:
        return max(1, int(math.ceil(self.reset_after)))


class RateLimiter:
    """
    키(지갑 주소, 클라이언트 IP 등)별 고정 윈도우 카운터

    윈도우가 없거나 만료되면 카운트 1로 새 윈도우를 시작하고 허용한다.
    그 외에는 카운트를 올린 뒤 count <= limit 인 동안만 허용한다.
    """

    def __init__(self, store: KeyValueStore, scope: str, limit: int, window_seconds: float, prefix: str = 'dewatt'):
        self.store = store
        self.scope = scope
        self.limit = limit
        self.window_seconds = window_seconds
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:ratelimit:{self.scope}:{key}"

    def check(self, key: str) -> RateLimitResult:
        count, reset_after = self.store.incr_window(self._key(key), self.window_seconds)
        allowed = count <= self.limit
        return RateLimitResult(
            allowed=allowed,
            limit=self.limit,
            remaining=max(0, self.limit - count),
            reset_after=reset_after
        )

    def allow(self, key: str) -> bool:
        return self.check(key).allowed

    def reset(self, key: str):
        self.store.delete(self._key(key))

    def enforce(self, key: str) -> RateLimitResult:
        result = self.check(key)
        if not result.allowed:
            raise BusinessError(
                APIError.RATE_LIMIT_EXCEEDED,
                data={'retry_after': result.retry_after}
            )
        return result
