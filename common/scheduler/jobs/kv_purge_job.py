import common.extensions as extensions
from common.cache.key_value_store import MemoryKeyValueStore
from common.utils.logging_utils import get_logger

logger = get_logger('kv_purge_job')


class KeyValuePurgeJob:
    """메모리 저장소에서 만료된 레이트 리밋 윈도우 / 캐시 항목 제거"""

    def __init__(self, store: MemoryKeyValueStore = None):
        self.store = store

    def execute(self) -> int:
        store = self.store if self.store is not None else extensions.kv_store
        if not isinstance(store, MemoryKeyValueStore):
            return 0

        purged = store.purge_expired()
        if purged:
            logger.info(f"만료된 키 {purged}건 삭제 (남은 키 {store.size()}건)")
        return purged
