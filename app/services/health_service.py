from datetime import datetime
from typing import Dict, Tuple

from pymongo.errors import PyMongoError
from redis.exceptions import RedisError

import common.extensions as extensions
from common.utils.logging_utils import get_logger

logger = get_logger('health_service')


class HealthService:

    @staticmethod
    def check() -> Tuple[Dict, int]:
        """DB / 원장 / 키-값 저장소 상태 점검. DB와 원장이 모두 연결되어야 healthy"""
        database_ok = HealthService._ping_database()
        ledger_health = extensions.ledger.health() if extensions.ledger else {'connected': False}
        ledger_ok = bool(ledger_health.get('connected'))

        healthy = database_ok and ledger_ok
        body = {
            'success': healthy,
            'status': 'healthy' if healthy else 'degraded',
            'database': 'connected' if database_ok else 'disconnected',
            'blockchain': 'connected' if ledger_ok else 'disconnected',
            'block_height': ledger_health.get('block_height'),
            'treasury_balance': extensions.ledger.treasury_balance() if ledger_ok else 0.0,
            'kv_store': 'connected' if HealthService._ping_kv_store() else 'disconnected',
            'timestamp': datetime.utcnow().isoformat() + 'Z'
        }
        return body, 200 if healthy else 503

    @staticmethod
    def _ping_database() -> bool:
        if extensions.mongo_db is None:
            return False
        try:
            extensions.mongo_db.command('ping')
            return True
        except PyMongoError as e:
            logger.error(f"MongoDB health check failed: {e}")
            return False

    @staticmethod
    def _ping_kv_store() -> bool:
        if extensions.kv_store is None:
            return False
        try:
            return extensions.kv_store.ping()
        except RedisError as e:
            logger.error(f"Key-value store health check failed: {e}")
            return False
