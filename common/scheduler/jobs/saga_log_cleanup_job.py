import common.extensions as extensions
from common.utils.logging_utils import get_logger
from app.models.mongodb.saga_transaction_log import SagaTransactionLogRepository

logger = get_logger('saga_log_cleanup_job')


class SagaLogCleanupJob:

    def __init__(self, retention_days: int = 30):
        self.retention_days = retention_days

    def execute(self) -> int:
        deleted = SagaTransactionLogRepository(extensions.mongo_db).delete_old_logs(days=self.retention_days)
        logger.info(f"{self.retention_days}일 이전 사가 로그 {deleted}건 삭제")
        return deleted
