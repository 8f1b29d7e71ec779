import json
from typing import Dict, Optional

from redis.exceptions import RedisError

from common.cache.key_value_store import KeyValueStore
from common.utils.logging_utils import get_logger

logger = get_logger('balance_cache')


class BalanceCache:
    """
    잔액 조회 응답 read-through 캐시 (지갑별, 짧은 TTL)

    캐시는 원본이 아니므로 저장소 오류는 로그만 남기고 미스로 취급한다.
    잔액 변경 이후의 무효화 실패가 이미 커밋된 변경을 실패로 만들면 안 된다.
    """

    def __init__(self, store: KeyValueStore, ttl: float = 5.0, prefix: str = 'dewatt'):
        self.store = store
        self.ttl = ttl
        self.prefix = prefix

    def _key(self, wallet: str) -> str:
        return f"{self.prefix}:balance:{wallet}"

    def get(self, wallet: str) -> Optional[Dict]:
        try:
            raw = self.store.get(self._key(wallet))
        except RedisError as e:
            logger.warning(f"Balance cache read failed: {e}")
            return None
        if raw is None:
            return None
        return json.loads(raw)

    def put(self, wallet: str, payload: Dict):
        try:
            self.store.set(self._key(wallet), json.dumps(payload), ttl=self.ttl)
        except RedisError as e:
            logger.warning(f"Balance cache write failed: {e}")

    def invalidate(self, wallet: str) -> bool:
        try:
            self.store.delete(self._key(wallet))
            return True
        except RedisError as e:
            #NOTE: 무효화 실패 시 최대 TTL 동안 이전 잔액이 보일 수 있음
            logger.error(f"Balance cache invalidation failed: {e}")
            return False
