import math
import time
from threading import Lock
from typing import Callable, Dict, Optional, Tuple


class KeyValueStore:
    """
    레이트 리미터와 잔액 캐시가 공유하는 키-값 저장소 인터페이스

    단일 프로세스에서는 MemoryKeyValueStore, 여러 인스턴스가 같은 윈도우/캐시를
    봐야 하는 배포에서는 RedisKeyValueStore를 주입한다.
    """

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str, ttl: Optional[float] = None):
        raise NotImplementedError

    def delete(self, key: str):
        raise NotImplementedError

    def incr_window(self, key: str, window: float) -> Tuple[int, float]:
        """
        고정 윈도우 카운터 증가

        키가 없거나 윈도우가 만료되었으면 1로 리셋하고 새 윈도우를 시작한다.
        (증가 후 카운트, 윈도우 종료까지 남은 초)를 반환한다.
        """
        raise NotImplementedError

    def ping(self) -> bool:
        return True


class MemoryKeyValueStore(KeyValueStore):

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = Lock()
        # key -> (value, expires_at)
        self._data: Dict[str, Tuple[object, Optional[float]]] = {}

    def _alive(self, key: str, now: float):
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and now >= expires_at:
            del self._data[key]
            return None
        return entry

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._alive(key, self._clock())
            return entry[0] if entry else None

    def set(self, key: str, value: str, ttl: Optional[float] = None):
        with self._lock:
            expires_at = self._clock() + ttl if ttl else None
            self._data[key] = (value, expires_at)

    def delete(self, key: str):
        with self._lock:
            self._data.pop(key, None)

    def incr_window(self, key: str, window: float) -> Tuple[int, float]:
        with self._lock:
            now = self._clock()
            entry = self._alive(key, now)

            if entry is None:
                expires_at = now + window
                self._data[key] = (1, expires_at)
                return 1, window

            count, expires_at = entry
            count = int(count) + 1
            self._data[key] = (count, expires_at)
            return count, max(0.0, expires_at - now)

    def purge_expired(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [
                key for key, (_, expires_at) in self._data.items()
                if expires_at is not None and now >= expires_at
            ]
            for key in expired:
                del self._data[key]
            return len(expired)

    def size(self) -> int:
        with self._lock:
            return len(self._data)


class RedisKeyValueStore(KeyValueStore):

    def __init__(self, client):
        self.client = client

    def get(self, key: str) -> Optional[str]:
        return self.client.get(key)

    def set(self, key: str, value: str, ttl: Optional[float] = None):
        if ttl:
            self.client.set(key, value, px=int(ttl * 1000))
        else:
            self.client.set(key, value)

    def delete(self, key: str):
        self.client.delete(key)

    def incr_window(self, key: str, window: float) -> Tuple[int, float]:
        window_ms = int(math.ceil(window * 1000))

        pipe = self.client.pipeline()
        pipe.incr(key)
        #NOTE: NX - 이미 만료시간이 있으면 윈도우를 연장하지 않는다 (Redis 7+)
        pipe.pexpire(key, window_ms, nx=True)
        pipe.pttl(key)
        count, _, remaining_ms = pipe.execute()

        if remaining_ms is None or remaining_ms < 0:
            self.client.pexpire(key, window_ms)
            remaining_ms = window_ms

        return int(count), remaining_ms / 1000.0

    def ping(self) -> bool:
        return bool(self.client.ping())
