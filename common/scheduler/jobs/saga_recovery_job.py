from typing import Dict

import common.extensions as extensions
from common.utils.logging_utils import get_logger
from app.models.mongodb.charging_session import ChargingSessionRepository
from app.models.mongodb.saga_transaction_log import (
    SagaTransactionLog,
    SagaTransactionLogRepository,
    BOOKING_SAGA_TYPE
)

logger = get_logger('saga_recovery_job')


class SagaRecoveryJob:
    """
    단계 사이에서 프로세스가 종료되어 in_progress 로 남은 예약 사가 정리

    - adjust_balance 단계까지 완료된 사가: completed 로 마감
    - 그 외: 생성된 active 세션을 cancelled 로 돌리고 compensated 로 마감
    """

    def __init__(self, older_than_seconds: int = 300, batch_size: int = 100):
        self.older_than_seconds = older_than_seconds
        self.batch_size = batch_size
        self.saga_repo = None
        self.session_repo = None

    def _recover(self, saga_log: SagaTransactionLog) -> str:
        transaction_id = saga_log.transaction_id
        charge_id = saga_log.metadata.get('charge_id')

        if saga_log.is_step_completed('adjust_balance'):
            self.saga_repo.complete_saga(transaction_id)
            logger.info(f"Stuck saga finalized as completed: {transaction_id} ({charge_id})")
            return 'completed'

        self.saga_repo.start_compensation(transaction_id)
        if charge_id and self.session_repo.cancel(charge_id):
            logger.warning(f"Session cancelled by recovery: {charge_id}")
        self.saga_repo.complete_compensation(transaction_id)
        logger.warning(f"Stuck saga compensated: {transaction_id} ({charge_id})")
        return 'compensated'

    def execute(self) -> Dict[str, int]:
        self.saga_repo = SagaTransactionLogRepository(extensions.mongo_db)
        self.session_repo = ChargingSessionRepository(extensions.mongo_db)

        stuck = self.saga_repo.find_stuck(BOOKING_SAGA_TYPE, self.older_than_seconds, self.batch_size)
        summary = {'completed': 0, 'compensated': 0, 'failed': 0}

        for saga_log in stuck:
            try:
                summary[self._recover(saga_log)] += 1
            except Exception as e:
                summary['failed'] += 1
                logger.error(f"사가 복구 실패 (transaction_id: {saga_log.transaction_id}): {str(e)}")
                continue

        if stuck:
            logger.info(f"Saga recovery finished: {summary}")
        return summary
