from flask_smorest import Api
from flask_apscheduler import APScheduler

api = Api()

redis_client = None

mongo_client = None
mongo_db = None

# NOTE: 레이트 리미터 / 잔액 캐시 저장소 (Redis 또는 메모리)
kv_store = None

# NOTE: 외부 원장 클라이언트 (SolanaMemoLedger)
ledger = None

scheduler = APScheduler()
